"""
Seller ranking consequences of an order status change.

Called by the order HTTP layer after a status update has been committed.
The state machine itself knows nothing about rankings.
"""

import logging

from marketplace.ordering.domain.models import Order
from rankings.domain.services import RankingService, best_effort_ranking

logger = logging.getLogger(__name__)


def apply_order_outcome_ranking(order: Order, previous_status: str, ranking_service: RankingService) -> bool:
    """
    Apply the seller's sales/reputation deltas for a finished order.

    - any transition into ``completed`` counts as a successful sale
    - ``processing -> canceled`` counts as a failed one (the seller accepted
      the order and did not fulfil it)

    Every other transition leaves rankings untouched. Failures are logged
    and swallowed.

    Returns:
        True if a ranking update was applied
    """
    if order.status == Order.STATUS_COMPLETED and previous_status != Order.STATUS_COMPLETED:
        was_successful = True
    elif order.status == Order.STATUS_CANCELED and previous_status == Order.STATUS_PROCESSING:
        was_successful = False
    else:
        return False

    logger.info(f"Applying order outcome ranking for order {order.id} (successful={was_successful})")
    return best_effort_ranking(
        "marketplace.order_outcome",
        ranking_service.apply_order_completion_ranking,
        order.product.seller_id,
        order.buyer_id,
        order.total_price,
        was_successful,
    )
