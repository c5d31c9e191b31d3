# pet_market/utils/role_utils.py
from pet_market.errors import ForbiddenError
from pet_market.models.user_model import Role

# Actions any signed-in account may attempt; ownership rules below narrow them
_COMMON_ACTIONS = {
    'manage_own_account', 'apply_for_adoption', 'view_adoption', 'cancel_adoption',
    'message_adoption', 'follow_up_adoption', 'post_rescue_update', 'donate', 'create_order'
}

_PROVIDER_ACTIONS = {'create_pet', 'update_pet', 'delete_pet', 'review_adoption', 'view_provider_stats'}

ROLE_PERMISSIONS = {
    Role.BUYER: frozenset(_COMMON_ACTIONS),
    Role.SELLER: frozenset(_COMMON_ACTIONS | _PROVIDER_ACTIONS | {
        'create_shop', 'manage_shop', 'create_product', 'update_product', 'delete_product',
        'manage_employees', 'review_adjustment', 'view_pending_adjustments', 'view_adjustments', 'set_stock',
        'view_shop_orders', 'update_order_status', 'view_invoices'
    }),
    Role.NGO: frozenset(_COMMON_ACTIONS | _PROVIDER_ACTIONS | {
        'create_rescue', 'manage_rescue'
    }),
    Role.EMPLOYEE: frozenset(_COMMON_ACTIONS | {
        'add_shop_products', 'manage_inventory', 'view_adjustments', 'set_stock', 'create_invoice',
        'view_invoices'
    }),
    Role.ADMIN: frozenset(_COMMON_ACTIONS | _PROVIDER_ACTIONS | {
        'create_rescue', 'manage_rescue', 'update_product', 'delete_product', 'view_shop_orders',
        'update_order_status'
    }),
}


def _is_adoption_party(identity, adoption):
    return identity.id in (adoption.applicant_id, adoption.provider_id)


def _employee_permission(permission):
    def rule(identity, employee):
        return employee.user_id == identity.id and employee.is_active and employee.has_permission(permission)
    return rule


# Ownership rules for non-admin callers, keyed by action
OWNERSHIP_RULES = {
    'update_pet': lambda identity, pet: pet.provider_id == identity.id,
    'delete_pet': lambda identity, pet: pet.provider_id == identity.id,
    'view_adoption': _is_adoption_party,
    'cancel_adoption': _is_adoption_party,
    'message_adoption': _is_adoption_party,
    'follow_up_adoption': _is_adoption_party,
    'review_adoption': lambda identity, adoption: adoption.provider_id == identity.id,
    'manage_rescue': lambda identity, rescue: rescue.ngo_id == identity.id,
    'post_rescue_update': lambda identity, rescue: rescue.ngo_id == identity.id or any(
        member.member_id == identity.id for member in rescue.team),
    'manage_shop': lambda identity, shop: shop.owner_id == identity.id,
    'manage_employees': lambda identity, shop: shop.owner_id == identity.id,
    'update_product': lambda identity, product: product.seller_id == identity.id,
    'delete_product': lambda identity, product: product.seller_id == identity.id,
    'review_adjustment': lambda identity, adjustment: adjustment.shop.owner_id == identity.id,
    'view_shop_orders': lambda identity, shop: shop.owner_id == identity.id,
    'update_order_status': lambda identity, order: order.shop.owner_id == identity.id,
    'manage_inventory': _employee_permission('canManageInventory'),
    'create_invoice': _employee_permission('canCreateInvoices'),
    'add_shop_products': _employee_permission('canAddProducts'),
}


def get_role_permissions(role):
    return ROLE_PERMISSIONS.get(role, frozenset())


def can(identity, action, resource=None):
    """Check whether the caller may perform an action, optionally on a resource.

    The role must grant the action. Admins skip ownership rules; everybody else
    must satisfy the rule registered for the action, when there is one.
    """
    if identity is None:
        return False
    if action not in get_role_permissions(identity.role):
        return False
    if identity.role == Role.ADMIN:
        return True
    rule = OWNERSHIP_RULES.get(action)
    if rule is None:
        return True
    return resource is not None and rule(identity, resource)


def authorize(identity, action, resource=None, message='Not authorized'):
    if not can(identity, action, resource):
        raise ForbiddenError(message)
