import uuid
from decimal import Decimal

from django.test import TestCase

from marketplace.catalog.domain.services import InventoryService
from marketplace.models import Order, Product
from marketplace.ordering.domain.services import OrderService, apply_order_outcome_ranking
from marketplace.tests.factories import AdminFactory, OrderFactory, ProductFactory, SellerFactory, UserFactory
from rankings.domain.models import UserRanking
from rankings.domain.services import RankingService
from utils.service_base import ErrorCodes


class OrderServiceIntegrationTest(TestCase):
    def setUp(self):
        self.service = OrderService(inventory_service=InventoryService())
        self.ranking_service = RankingService()

        self.buyer = UserFactory()
        self.seller = SellerFactory()
        self.admin = AdminFactory()
        self.product = ProductFactory(seller=self.seller, price=Decimal("10.00"), stock_quantity=5)

    def _stock(self):
        return Product.objects.get(id=self.product.id).stock_quantity

    def _score(self, category):
        ranking = UserRanking.objects.filter(user=self.seller, category=category).first()
        return ranking.score if ranking else None

    def _place(self, quantity=2, total="20.00"):
        result = self.service.create_order(self.buyer, self.product.id, quantity, Decimal(total))
        self.assertTrue(result.ok, result.error_detail)
        return result.value

    # ===== Creation =====

    def test_create_decrements_stock(self):
        order = self._place()

        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.total_price, Decimal("20.00"))
        self.assertEqual(self._stock(), 3)

    def test_seller_completion_ranks_seller(self):
        order = self._place()

        result = self.service.update_status(order.id, Order.STATUS_COMPLETED, self.seller)
        self.assertTrue(result.ok)
        change = result.value
        self.assertTrue(apply_order_outcome_ranking(change.order, change.previous_status, self.ranking_service))

        self.assertAlmostEqual(self._score("sales"), 2.0)
        self.assertEqual(self._score("reputation"), 5)
        self.assertEqual(self._stock(), 3)

    def test_insufficient_stock(self):
        result = self.service.create_order(self.buyer, self.product.id, 6, Decimal("60.00"))

        self.assertEqual(result.error, ErrorCodes.INSUFFICIENT_STOCK)
        self.assertEqual(self._stock(), 5)
        self.assertFalse(Order.objects.exists())

    def test_price_mismatch(self):
        result = self.service.create_order(self.buyer, self.product.id, 2, Decimal("19.00"))

        self.assertEqual(result.error, ErrorCodes.PRICE_MISMATCH)
        self.assertEqual(self._stock(), 5)

    def test_price_within_tolerance(self):
        order = self._place(total="20.01")

        self.assertEqual(order.total_price, Decimal("20.01"))

    def test_inactive_product(self):
        Product.objects.filter(id=self.product.id).update(is_active=False)

        result = self.service.create_order(self.buyer, self.product.id, 1, Decimal("10.00"))

        self.assertEqual(result.error, ErrorCodes.PRODUCT_INACTIVE)

    def test_unknown_product(self):
        result = self.service.create_order(self.buyer, uuid.uuid4(), 1, Decimal("10.00"))

        self.assertEqual(result.error, ErrorCodes.PRODUCT_NOT_FOUND)

    def test_invalid_quantity(self):
        result = self.service.create_order(self.buyer, self.product.id, 0, Decimal("0.00"))

        self.assertEqual(result.error, ErrorCodes.INVALID_QUANTITY)

    def test_boolean_quantity_is_rejected(self):
        result = self.service.create_order(self.buyer, self.product.id, True, Decimal("10.00"))

        self.assertEqual(result.error, ErrorCodes.INVALID_QUANTITY)
        self.assertEqual(self._stock(), 5)

    def test_non_finite_total_is_rejected(self):
        for total in (Decimal("NaN"), "Infinity", "-Infinity"):
            result = self.service.create_order(self.buyer, self.product.id, 1, total)

            self.assertEqual(result.error, ErrorCodes.VALIDATION_ERROR, total)

        self.assertEqual(self._stock(), 5)
        self.assertFalse(Order.objects.exists())

    # ===== Status =====

    def test_terminal_orders_reject_every_update(self):
        for terminal in (Order.STATUS_COMPLETED, Order.STATUS_CANCELED):
            order = OrderFactory(buyer=self.buyer, product=self.product, status=terminal)
            for target in ("pending", "processing", "shipped", "completed", "canceled"):
                result = self.service.update_status(order.id, target, self.admin, is_admin=True)
                self.assertEqual(result.error, ErrorCodes.INVALID_TRANSITION, f"{terminal} -> {target}")

    def test_buyer_cannot_set_processing(self):
        order = self._place()

        result = self.service.update_status(order.id, Order.STATUS_PROCESSING, self.buyer)

        self.assertEqual(result.error, ErrorCodes.PERMISSION_DENIED)
        self.assertEqual(Order.objects.get(id=order.id).status, Order.STATUS_PENDING)

    def test_seller_cannot_cancel_through_status(self):
        order = self._place()

        result = self.service.update_status(order.id, Order.STATUS_CANCELED, self.seller)

        self.assertEqual(result.error, ErrorCodes.PERMISSION_DENIED)

    def test_stranger_cannot_update(self):
        order = self._place()

        result = self.service.update_status(order.id, Order.STATUS_PROCESSING, UserFactory())

        self.assertEqual(result.error, ErrorCodes.PERMISSION_DENIED)

    def test_buyer_cancel_restores_stock(self):
        order = self._place()

        result = self.service.update_status(order.id, Order.STATUS_CANCELED, self.buyer)

        self.assertTrue(result.ok)
        self.assertEqual(result.value.previous_status, Order.STATUS_PENDING)
        self.assertEqual(self._stock(), 5)
        change = result.value
        self.assertFalse(apply_order_outcome_ranking(change.order, change.previous_status, self.ranking_service))
        self.assertIsNone(self._score("reputation"))

    def test_processing_cancel_penalizes_seller(self):
        order = self._place()
        self.service.update_status(order.id, Order.STATUS_PROCESSING, self.seller)

        result = self.service.update_status(order.id, Order.STATUS_CANCELED, self.buyer)
        apply_order_outcome_ranking(result.value.order, result.value.previous_status, self.ranking_service)

        self.assertAlmostEqual(self._score("sales"), -1.0)
        self.assertEqual(self._score("reputation"), -10)
        self.assertEqual(self._stock(), 5)

    def test_full_seller_path(self):
        order = self._place()
        for target in (Order.STATUS_PROCESSING, Order.STATUS_SHIPPED, Order.STATUS_COMPLETED):
            self.assertTrue(self.service.update_status(order.id, target, self.seller).ok)

        self.assertEqual(Order.objects.get(id=order.id).status, Order.STATUS_COMPLETED)

    def test_unknown_status_value(self):
        order = self._place()

        result = self.service.update_status(order.id, "refunded", self.seller)

        self.assertEqual(result.error, ErrorCodes.VALIDATION_ERROR)

    def test_missing_order(self):
        result = self.service.update_status(uuid.uuid4(), Order.STATUS_PROCESSING, self.seller)

        self.assertEqual(result.error, ErrorCodes.ORDER_NOT_FOUND)

    # ===== Cancel =====

    def test_seller_cancels_pending_order(self):
        order = self._place()

        result = self.service.cancel_order(order.id, self.seller)

        self.assertTrue(result.ok)
        self.assertEqual(result.value.status, Order.STATUS_CANCELED)
        self.assertEqual(self._stock(), 5)

    def test_cancel_only_pending(self):
        order = self._place()
        self.service.update_status(order.id, Order.STATUS_PROCESSING, self.seller)

        result = self.service.cancel_order(order.id, self.buyer)

        self.assertEqual(result.error, ErrorCodes.INVALID_ORDER_STATE)
        self.assertEqual(self._stock(), 3)

    # ===== Details =====

    def test_buyer_updates_address(self):
        order = self._place()

        patch = {"shipping_address": "1 New St", "status": "completed"}
        result = self.service.update_order(order.id, patch, self.buyer)

        self.assertTrue(result.ok)
        order.refresh_from_db()
        self.assertEqual(order.shipping_address, "1 New St")
        self.assertEqual(order.status, Order.STATUS_PENDING)

    def test_seller_cannot_update_details(self):
        order = self._place()

        result = self.service.update_order(order.id, {"shipping_address": "x"}, self.seller)

        self.assertEqual(result.error, ErrorCodes.PERMISSION_DENIED)

    def test_completed_order_details_admin_only(self):
        order = OrderFactory(buyer=self.buyer, product=self.product, status=Order.STATUS_COMPLETED)

        denied = self.service.update_order(order.id, {"shipping_address": "x"}, self.buyer)
        allowed = self.service.update_order(order.id, {"shipping_address": "x"}, self.admin, is_admin=True)

        self.assertEqual(denied.error, ErrorCodes.INVALID_ORDER_STATE)
        self.assertTrue(allowed.ok)

    # ===== Reads =====

    def test_list_and_stats(self):
        first = self._place(quantity=1, total="10.00")
        self._place(quantity=2, total="20.00")
        self.service.update_status(first.id, Order.STATUS_COMPLETED, self.seller)

        sales = self.service.list_orders(seller_id=self.seller.id).value
        completed = self.service.list_orders(buyer_id=self.buyer.id, status=Order.STATUS_COMPLETED).value
        seller_stats = self.service.get_seller_stats(self.seller.id).value
        buyer_stats = self.service.get_buyer_stats(self.buyer.id).value

        self.assertEqual(sales["count"], 2)
        self.assertEqual(completed["count"], 1)
        self.assertEqual(seller_stats["total_orders"], 2)
        self.assertEqual(seller_stats["total_revenue"], Decimal("30.00"))
        self.assertEqual(seller_stats["pending_orders"], 1)
        self.assertEqual(seller_stats["completed_orders"], 1)
        self.assertEqual(buyer_stats["total_spent"], Decimal("30.00"))

    def test_empty_stats(self):
        stats = self.service.get_buyer_stats(self.buyer.id).value

        self.assertEqual(stats["total_orders"], 0)
        self.assertEqual(stats["total_spent"], Decimal("0.00"))

    def test_get_order_visibility(self):
        order = self._place()

        self.assertTrue(self.service.get_order(order.id, self.seller).ok)
        self.assertEqual(self.service.get_order(order.id, UserFactory()).error, ErrorCodes.PERMISSION_DENIED)
