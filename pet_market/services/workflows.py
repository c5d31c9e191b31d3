"""Status transition tables for the adoption, rescue, inventory and order workflows.

Each table maps a current status to the set of statuses it may move to.
``next_state`` is the single place a requested transition is accepted or
refused; services apply side effects only after it returns.
"""
from pet_market.errors import InvalidTransition
from pet_market.models.adoption_model import AdoptionStatus
from pet_market.models.inventory_model import AdjustmentStatus
from pet_market.models.order_model import OrderStatus
from pet_market.models.pet_model import PetStatus
from pet_market.models.rescue_model import RescueStatus

ADOPTION_TRANSITIONS = {
    AdoptionStatus.PENDING: {AdoptionStatus.APPROVED, AdoptionStatus.REJECTED, AdoptionStatus.CANCELLED},
    AdoptionStatus.APPROVED: {AdoptionStatus.COMPLETED, AdoptionStatus.CANCELLED},
    AdoptionStatus.REJECTED: set(),
    AdoptionStatus.COMPLETED: set(),
    AdoptionStatus.CANCELLED: set(),
}

# Pet status written alongside each adoption transition; None leaves the pet alone
PET_STATUS_ON_ADOPTION = {
    AdoptionStatus.APPROVED: None,
    AdoptionStatus.REJECTED: PetStatus.AVAILABLE,
    AdoptionStatus.COMPLETED: PetStatus.ADOPTED,
    AdoptionStatus.CANCELLED: PetStatus.AVAILABLE,
}

# Rescues may move between any two statuses
RESCUE_TRANSITIONS = {status: set(RescueStatus) for status in RescueStatus}

ADJUSTMENT_TRANSITIONS = {
    AdjustmentStatus.PENDING: {AdjustmentStatus.APPROVED, AdjustmentStatus.REJECTED},
    AdjustmentStatus.APPROVED: set(),
    AdjustmentStatus.REJECTED: set(),
}

# Orders may move between any two statuses
ORDER_TRANSITIONS = {status: set(OrderStatus) for status in OrderStatus}

_ADOPTION_MESSAGES = {
    AdoptionStatus.APPROVED: 'Can only approve applications that are pending',
    AdoptionStatus.REJECTED: 'Can only reject applications that are pending',
    AdoptionStatus.COMPLETED: 'Can only complete applications that are approved',
    AdoptionStatus.CANCELLED: 'Can only cancel applications that are pending or approved',
    AdoptionStatus.PENDING: 'Applications cannot be moved back to pending',
}


def next_state(table, current, target, message=None):
    """Return ``target`` if ``current -> target`` is in ``table``, else raise InvalidTransition."""
    if target not in table.get(current, ()):
        raise InvalidTransition(message or f'Invalid status transition from {current.value} to {target.value}')
    return target


def next_adoption_state(current, target):
    return next_state(ADOPTION_TRANSITIONS, current, target, _ADOPTION_MESSAGES.get(target))


def next_rescue_state(current, target):
    return next_state(RESCUE_TRANSITIONS, current, target)


def next_adjustment_state(current, target):
    return next_state(ADJUSTMENT_TRANSITIONS, current, target, 'Adjustment is not pending')


def next_order_state(current, target):
    return next_state(ORDER_TRANSITIONS, current, target)


def initial_adjustment_status(damaged_quantity, expired_quantity):
    """Adjustments carrying damaged or expired stock wait for the shop owner."""
    if damaged_quantity > 0 or expired_quantity > 0:
        return AdjustmentStatus.PENDING
    return AdjustmentStatus.APPROVED


def is_terminal(table, status):
    return not table.get(status)
