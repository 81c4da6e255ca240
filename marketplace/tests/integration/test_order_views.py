import uuid
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.models import Order, Product
from marketplace.tests.factories import AdminFactory, OrderFactory, ProductFactory, SellerFactory, UserFactory
from rankings.domain.models import UserRanking


class OrderViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()

        self.buyer = UserFactory(username="buyer", email="buyer@example.com")
        self.seller = SellerFactory(username="seller", email="seller@example.com")
        self.admin_user = AdminFactory(username="admin", email="admin@example.com")

        self.product = ProductFactory(seller=self.seller, stock_quantity=5, price=Decimal("10.00"))

        self.order_list_url = reverse("marketplace:order-list")

    def _detail_url(self, name, order):
        return reverse(f"marketplace:order-{name}", kwargs={"pk": order.id})

    def _create(self, quantity=2, total_price="20.00"):
        self.client.force_authenticate(user=self.buyer)
        return self.client.post(
            self.order_list_url,
            {
                "product_id": str(self.product.id),
                "quantity": quantity,
                "total_price": total_price,
                "shipping_address": "123 Main St, Test City",
            },
            format="json",
        )

    def test_create_order_success(self):
        response = self._create()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(Decimal(response.data["total_price"]), Decimal("20.00"))
        self.assertEqual(response.data["buyer"]["id"], str(self.buyer.id))
        self.assertEqual(Product.objects.get(id=self.product.id).stock_quantity, 3)

    def test_create_order_price_mismatch(self):
        response = self._create(total_price="15.00")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "price_mismatch")
        self.assertEqual(Product.objects.get(id=self.product.id).stock_quantity, 5)

    def test_create_order_insufficient_stock(self):
        response = self._create(quantity=6, total_price="60.00")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "insufficient_stock")

    def test_create_order_bad_payload(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(self.order_list_url, {"product_id": "nope", "quantity": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_product(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(
            self.order_list_url,
            {"product_id": str(uuid.uuid4()), "quantity": 1, "total_price": "10.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_requires_authentication(self):
        response = self.client.get(reverse("marketplace:order-my-purchases"))

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_seller_completes_order_and_is_ranked(self):
        order = Order.objects.get(id=self._create().data["id"])
        self.client.force_authenticate(user=self.seller)

        response = self.client.patch(self._detail_url("update-status", order), {"status": "completed"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "completed")
        sales = UserRanking.objects.get(user=self.seller, category="sales")
        reputation = UserRanking.objects.get(user=self.seller, category="reputation")
        self.assertAlmostEqual(sales.score, 2.0)
        self.assertEqual(reputation.score, 5)
        self.assertEqual(reputation.updated_by_id, self.buyer.id)

    def test_buyer_cannot_set_processing(self):
        order = Order.objects.get(id=self._create().data["id"])

        response = self.client.patch(self._detail_url("update-status", order), {"status": "processing"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_completed_order_is_final(self):
        order = OrderFactory(buyer=self.buyer, product=self.product, status=Order.STATUS_COMPLETED)
        self.client.force_authenticate(user=self.admin_user)

        response = self.client.patch(self._detail_url("update-status", order), {"status": "canceled"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "invalid_transition")

    def test_invalid_status_value(self):
        order = OrderFactory(buyer=self.buyer, product=self.product)
        self.client.force_authenticate(user=self.buyer)

        response = self.client.patch(self._detail_url("update-status", order), {"status": "lost"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_put_with_status_changes_status(self):
        order = Order.objects.get(id=self._create().data["id"])

        response = self.client.put(self._detail_url("detail", order), {"status": "canceled"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "canceled")
        self.assertEqual(Product.objects.get(id=self.product.id).stock_quantity, 5)

    def test_put_updates_address(self):
        order = OrderFactory(buyer=self.buyer, product=self.product)
        self.client.force_authenticate(user=self.buyer)

        response = self.client.put(self._detail_url("detail", order), {"shipping_address": "2 Side St"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["shipping_address"], "2 Side St")

    def test_cancel_pending_order(self):
        order = Order.objects.get(id=self._create().data["id"])

        response = self.client.post(self._detail_url("cancel", order))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Product.objects.get(id=self.product.id).stock_quantity, 5)

        again = self.client.post(self._detail_url("cancel", order))
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)

    def test_retrieve_permissions(self):
        order = OrderFactory(buyer=self.buyer, product=self.product)

        self.client.force_authenticate(user=self.seller)
        self.assertEqual(self.client.get(self._detail_url("detail", order)).status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=UserFactory())
        self.assertEqual(self.client.get(self._detail_url("detail", order)).status_code, status.HTTP_403_FORBIDDEN)

    def test_list_is_admin_only(self):
        OrderFactory(buyer=self.buyer, product=self.product, status=Order.STATUS_SHIPPED)
        OrderFactory(buyer=self.buyer, product=self.product)

        self.client.force_authenticate(user=self.buyer)
        self.assertEqual(self.client.get(self.order_list_url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get(self.order_list_url, {"status": "shipped"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

    def test_my_purchases_and_sales(self):
        OrderFactory(buyer=self.buyer, product=self.product)
        OrderFactory(product=self.product)

        self.client.force_authenticate(user=self.buyer)
        purchases = self.client.get(reverse("marketplace:order-my-purchases"))

        self.client.force_authenticate(user=self.seller)
        sales = self.client.get(reverse("marketplace:order-my-sales"))

        self.assertEqual(purchases.data["count"], 1)
        self.assertEqual(sales.data["count"], 2)

    def test_stats(self):
        OrderFactory(buyer=self.buyer, product=self.product, quantity=2, total_price=Decimal("20.00"))

        self.client.force_authenticate(user=self.seller)
        seller_stats = self.client.get(reverse("marketplace:order-seller-stats"))
        forbidden = self.client.get(reverse("marketplace:order-buyer-stats"), {"user_id": str(self.buyer.id)})

        self.client.force_authenticate(user=self.admin_user)
        buyer_stats = self.client.get(reverse("marketplace:order-buyer-stats"), {"user_id": str(self.buyer.id)})

        self.assertEqual(seller_stats.data["total_orders"], 1)
        self.assertEqual(Decimal(seller_stats.data["total_revenue"]), Decimal("20.00"))
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(buyer_stats.data["pending_orders"], 1)

    def test_metrics_endpoint(self):
        response = self.client.get(reverse("marketplace:metrics"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(b"marketplace_orders_placed", response.content)
