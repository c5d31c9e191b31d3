# Inventory adjustment business logic
import logging
from datetime import timedelta

from pet_market import db
from pet_market.errors import ForbiddenError, NotFoundError, ValidationError
from pet_market.models.inventory_model import InventoryAdjustment, AdjustmentType, AdjustmentStatus
from pet_market.models.shop_model import Product
from pet_market.models.user_model import Role
from pet_market.services.employee_service import get_active_employee
from pet_market.services.product_service import format_product
from pet_market.services.shop_service import get_owned_shop
from pet_market.services.workflows import initial_adjustment_status, next_adjustment_state
from pet_market.utils.role_utils import authorize
from pet_market.utils.util import (
    atomic, coerce_id, iso, paginate, parse_date, parse_enum, parse_int, require_fields
)

logger = logging.getLogger(__name__)

PRODUCT_NOT_IN_SHOP = 'Product not found or not part of your shop'
REVIEW_STATUSES = (AdjustmentStatus.APPROVED.value, AdjustmentStatus.REJECTED.value)


def _person(user):
    if user is None:
        return None
    return {'id': user.id, 'firstName': user.first_name, 'lastName': user.last_name, 'email': user.email}


def format_adjustment(adjustment):
    product = adjustment.product
    return {
        'id': adjustment.id,
        'product': {
            'id': product.id,
            'name': product.name,
            'images': product.images or [],
            'category': product.category,
            'price': product.price,
        } if product else None,
        'shop': adjustment.shop_id,
        'adjustedBy': _person(adjustment.adjusted_by),
        'approvedBy': _person(adjustment.approved_by),
        'type': adjustment.type.value,
        'quantityChange': adjustment.quantity_change,
        'damagedQuantity': adjustment.damaged_quantity,
        'expiredQuantity': adjustment.expired_quantity,
        'expiryDate': iso(adjustment.expiry_date),
        'previousStock': adjustment.previous_stock,
        'newStock': adjustment.new_stock,
        'notes': adjustment.notes,
        'requiresApproval': adjustment.requires_approval,
        'status': adjustment.status.value,
        'rejectionReason': adjustment.rejection_reason,
        'createdAt': iso(adjustment.created_at),
        'updatedAt': iso(adjustment.updated_at),
    }


def _caller_shop(identity):
    """Shop the caller works in: the seller's own shop or the employee's shop."""
    if identity.role == Role.SELLER:
        return get_owned_shop(identity)
    if identity.role == Role.EMPLOYEE:
        return get_active_employee(identity).shop
    raise ForbiddenError('Unauthorized')


def _shop_product(product_id, shop_id):
    product_id = coerce_id(product_id)
    product = None
    if product_id is not None:
        product = (Product.query.filter_by(id=product_id, shop_id=shop_id)
                   .with_for_update().first())
    if product is None:
        raise NotFoundError(PRODUCT_NOT_IN_SHOP)
    return product


def create_adjustment(identity, data):
    if identity.role != Role.EMPLOYEE:
        raise ForbiddenError('Only employees can create inventory adjustments')
    employee = get_active_employee(identity)
    authorize(identity, 'manage_inventory', employee, message='You do not have permission to manage inventory')

    require_fields(data, 'product', 'type')
    adjustment_type = parse_enum(AdjustmentType, data['type'], 'type')
    quantity_change = parse_int(data.get('quantityChange'), 'quantityChange')
    damaged = parse_int(data.get('damagedQuantity'), 'damagedQuantity', minimum=0, default=0)
    expired = parse_int(data.get('expiredQuantity'), 'expiredQuantity', minimum=0, default=0)
    expiry_date = parse_date(data['expiryDate'], 'expiryDate') if data.get('expiryDate') else None

    with atomic():
        product = _shop_product(data['product'], employee.shop_id)
        previous = product.stock
        if data.get('newStock') not in (None, ''):
            new_stock = parse_int(data['newStock'], 'newStock', minimum=0)
        else:
            new_stock = max(0, previous + quantity_change - damaged - expired)
        status = initial_adjustment_status(damaged, expired)

        adjustment = InventoryAdjustment(
            product=product,
            shop_id=employee.shop_id,
            adjusted_by_id=identity.id,
            type=adjustment_type,
            quantity_change=quantity_change,
            damaged_quantity=damaged,
            expired_quantity=expired,
            expiry_date=expiry_date,
            previous_stock=previous,
            new_stock=new_stock,
            notes=data.get('notes'),
            requires_approval=bool(data.get('requiresApproval')) or status == AdjustmentStatus.PENDING,
            status=status
        )
        db.session.add(adjustment)
        if status == AdjustmentStatus.APPROVED:
            product.stock = new_stock

    if status == AdjustmentStatus.APPROVED:
        logger.info(f"Product {product.id} stock {previous} -> {new_stock} by adjustment {adjustment.id}")
    else:
        logger.info(f"Adjustment {adjustment.id} on product {product.id} waiting for approval")
    return format_adjustment(adjustment)


def review_adjustment(identity, adjustment_id, data):
    status = data.get('status')
    if status not in REVIEW_STATUSES:
        raise ValidationError('Status must be "approved" or "rejected"')
    target = AdjustmentStatus(status)
    if identity.role != Role.SELLER:
        raise ForbiddenError('Only sellers can approve/reject adjustments')
    if target == AdjustmentStatus.REJECTED and not data.get('rejectionReason'):
        raise ValidationError('Rejection reason is required')
    shop = get_owned_shop(identity)

    with atomic():
        adjustment_id = coerce_id(adjustment_id)
        adjustment = None
        if adjustment_id is not None:
            adjustment = (InventoryAdjustment.query.filter_by(id=adjustment_id, shop_id=shop.id)
                          .with_for_update().first())
        if adjustment is None:
            raise NotFoundError('Adjustment not found')
        authorize(identity, 'review_adjustment', adjustment)
        adjustment.status = next_adjustment_state(adjustment.status, target)
        adjustment.approved_by_id = identity.id

        if target == AdjustmentStatus.REJECTED:
            adjustment.rejection_reason = data['rejectionReason']
        else:
            product = None
            if adjustment.product_id is not None:
                product = db.session.get(Product, adjustment.product_id, with_for_update=True)
            if product is None:
                raise NotFoundError('Product not found')
            previous = product.stock
            product.stock = adjustment.new_stock

    if target == AdjustmentStatus.APPROVED:
        logger.info(f"Adjustment {adjustment.id} approved; product {product.id} stock {previous} -> {product.stock}")
    else:
        logger.info(f"Adjustment {adjustment.id} rejected by seller {identity.id}")
    return format_adjustment(adjustment)


def list_pending_adjustments(identity, filters):
    authorize(identity, 'view_pending_adjustments', message='Only sellers can view pending adjustments')
    shop = get_owned_shop(identity)
    query = (InventoryAdjustment.query
             .filter_by(shop_id=shop.id, status=AdjustmentStatus.PENDING)
             .order_by(InventoryAdjustment.created_at.desc(), InventoryAdjustment.id.desc()))
    adjustments, pagination = paginate(query, filters.get('page'), filters.get('limit'))
    return {'adjustments': [format_adjustment(a) for a in adjustments], 'pagination': pagination}


def list_adjustment_history(identity, filters):
    authorize(identity, 'view_adjustments', message='Unauthorized')
    shop = _caller_shop(identity)
    query = InventoryAdjustment.query.filter_by(shop_id=shop.id)
    if filters.get('status'):
        query = query.filter(InventoryAdjustment.status == parse_enum(AdjustmentStatus, filters['status'], 'status'))
    if filters.get('type'):
        query = query.filter(InventoryAdjustment.type == parse_enum(AdjustmentType, filters['type'], 'type'))
    if filters.get('product'):
        query = query.filter(InventoryAdjustment.product_id == coerce_id(filters['product']))
    if filters.get('startDate'):
        query = query.filter(InventoryAdjustment.created_at >= parse_date(filters['startDate'], 'startDate'))
    if filters.get('endDate'):
        # The whole end day is included
        end = parse_date(filters['endDate'], 'endDate') + timedelta(days=1)
        query = query.filter(InventoryAdjustment.created_at < end)

    query = query.order_by(InventoryAdjustment.created_at.desc(), InventoryAdjustment.id.desc())
    adjustments, pagination = paginate(query, filters.get('page'), filters.get('limit'))
    return {'adjustments': [format_adjustment(a) for a in adjustments], 'pagination': pagination}


def set_product_stock(identity, product_id, data):
    """Overwrite stock directly, clamped at zero, outside the approval flow."""
    if data.get('stock') in (None, ''):
        raise ValidationError('Stock value is required')
    stock = parse_int(data['stock'], 'stock')
    authorize(identity, 'set_stock', message='Unauthorized')
    if identity.role == Role.EMPLOYEE:
        employee = get_active_employee(identity)
        authorize(identity, 'manage_inventory', employee, message='You do not have permission to manage inventory')
    shop = _caller_shop(identity)

    with atomic():
        product = _shop_product(product_id, shop.id)
        previous = product.stock
        product.stock = max(0, stock)
    logger.info(f"Product {product.id} stock set {previous} -> {product.stock} by user {identity.id}")
    return format_product(product)
