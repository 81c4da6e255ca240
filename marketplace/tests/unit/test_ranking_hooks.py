import uuid
from decimal import Decimal
from unittest.mock import MagicMock, Mock

import pytest

from marketplace.models import Order
from marketplace.ordering.domain.services import apply_order_outcome_ranking
from rankings.domain.services import RankingService
from utils.service_base import ErrorCodes, service_err, service_ok


def _order(status):
    order = Mock(spec=Order)
    order.id = uuid.uuid4()
    order.status = status
    order.buyer_id = uuid.uuid4()
    order.product = Mock(seller_id=uuid.uuid4())
    order.total_price = Decimal("20.00")
    return order


@pytest.mark.unit
class TestOrderOutcomeRanking:
    def setup_method(self):
        self.ranking_service = MagicMock(spec=RankingService)
        self.ranking_service.apply_order_completion_ranking.return_value = service_ok({})

    @pytest.mark.parametrize("previous", ["pending", "processing", "shipped"])
    def test_completion_is_a_success(self, previous):
        order = _order(Order.STATUS_COMPLETED)

        assert apply_order_outcome_ranking(order, previous, self.ranking_service)

        self.ranking_service.apply_order_completion_ranking.assert_called_once_with(
            order.product.seller_id, order.buyer_id, order.total_price, True
        )

    def test_processing_cancel_is_a_failure(self):
        order = _order(Order.STATUS_CANCELED)

        assert apply_order_outcome_ranking(order, Order.STATUS_PROCESSING, self.ranking_service)

        args = self.ranking_service.apply_order_completion_ranking.call_args[0]
        assert args[3] is False

    @pytest.mark.parametrize(
        "previous,current",
        [("pending", "canceled"), ("pending", "processing"), ("processing", "shipped")],
    )
    def test_other_transitions_leave_rankings(self, previous, current):
        assert not apply_order_outcome_ranking(_order(current), previous, self.ranking_service)

        self.ranking_service.apply_order_completion_ranking.assert_not_called()

    def test_ranking_failure_is_swallowed(self):
        self.ranking_service.apply_order_completion_ranking.return_value = service_err(ErrorCodes.INTERNAL_ERROR)

        assert not apply_order_outcome_ranking(_order("completed"), "shipped", self.ranking_service)

    def test_ranking_exception_is_swallowed(self):
        self.ranking_service.apply_order_completion_ranking.side_effect = RuntimeError("db down")

        assert not apply_order_outcome_ranking(_order("completed"), "shipped", self.ranking_service)
