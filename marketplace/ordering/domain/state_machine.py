"""
Order status transitions.

    pending    -> processing | completed | canceled
    processing -> completed | shipped | canceled
    shipped    -> completed

``completed`` and ``canceled`` are terminal.
"""

from marketplace.ordering.domain.models import Order

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: frozenset({Order.STATUS_PROCESSING, Order.STATUS_COMPLETED, Order.STATUS_CANCELED}),
    Order.STATUS_PROCESSING: frozenset({Order.STATUS_COMPLETED, Order.STATUS_SHIPPED, Order.STATUS_CANCELED}),
    Order.STATUS_SHIPPED: frozenset({Order.STATUS_COMPLETED}),
    Order.STATUS_COMPLETED: frozenset(),
    Order.STATUS_CANCELED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if not targets)

# Targets a non-admin party to the order may request
SELLER_TARGETS = frozenset({Order.STATUS_PROCESSING, Order.STATUS_SHIPPED, Order.STATUS_COMPLETED})
BUYER_TARGETS = frozenset({Order.STATUS_CANCELED})


class InvalidTransitionError(Exception):
    def __init__(self, current_status: str, new_status: str):
        self.current_status = current_status
        self.new_status = new_status
        if current_status in TERMINAL_STATUSES:
            message = f"Cannot change status of a {current_status} order"
        else:
            message = f"Cannot transition from {current_status} to {new_status}"
        super().__init__(message)


def is_valid_status(status) -> bool:
    return status in ALLOWED_TRANSITIONS


def can_transition(current_status: str, new_status: str) -> bool:
    return new_status in ALLOWED_TRANSITIONS.get(current_status, frozenset())


def validate_transition(current_status: str, new_status: str) -> None:
    """Raise InvalidTransitionError unless the table allows the move."""
    if not can_transition(current_status, new_status):
        raise InvalidTransitionError(current_status, new_status)


def role_may_set(new_status: str, is_seller: bool, is_buyer: bool) -> bool:
    """
    Role restriction for non-admin callers.

    Each role the caller holds on the order must allow the target, so a user
    buying their own product is held to both sets.
    """
    if is_seller and new_status not in SELLER_TARGETS:
        return False
    if is_buyer and new_status not in BUYER_TARGETS:
        return False
    return True
