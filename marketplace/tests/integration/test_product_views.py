from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.models import Product
from marketplace.tests.factories import AdminFactory, OrderFactory, ProductFactory, SellerFactory, UserFactory


class ProductViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()

        self.seller = SellerFactory(username="seller", email="seller@example.com")
        self.other_seller = SellerFactory(username="other", email="other@example.com")
        self.admin_user = AdminFactory(username="admin", email="admin@example.com")

        self.product = ProductFactory(seller=self.seller, price=Decimal("10.00"), category="Pottery")

        self.list_url = reverse("marketplace:product-list")
        self.detail_url = reverse("marketplace:product-detail", kwargs={"pk": self.product.id})

    def test_browse_is_public(self):
        response = self.client.get(self.list_url)
        detail = self.client.get(self.detail_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["seller"]["id"], str(self.seller.id))
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(detail.data["category"], "Pottery")

    def test_create_requires_authentication(self):
        response = self.client.post(self.list_url, {"name": "Bowl", "description": "Deep", "price": "5.00"})

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_create_product(self):
        user = UserFactory()
        self.client.force_authenticate(user=user)

        response = self.client.post(
            self.list_url,
            {"name": "Bowl", "description": "Deep bowl", "price": "5.00", "stock_quantity": 4, "category": "Pottery"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["seller"]["id"], str(user.id))
        self.assertEqual(response.data["stock_quantity"], 4)

    def test_create_rejects_negative_price(self):
        self.client.force_authenticate(user=self.seller)

        response = self.client.post(
            self.list_url, {"name": "Bowl", "description": "Deep bowl", "price": "-1.00"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "validation_error")
        self.assertIn("price", response.data["detail"])

    def test_partial_update_by_seller(self):
        self.client.force_authenticate(user=self.seller)

        response = self.client.patch(self.detail_url, {"price": "11.50"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["price"]), Decimal("11.50"))
        self.assertEqual(response.data["name"], self.product.name)

    def test_update_by_other_seller_forbidden(self):
        self.client.force_authenticate(user=self.other_seller)

        response = self.client.put(self.detail_url, {"stock_quantity": 100}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"], "permission_denied")
        self.assertEqual(Product.objects.get(id=self.product.id).stock_quantity, self.product.stock_quantity)

    def test_admin_deactivates_product(self):
        self.client.force_authenticate(user=self.admin_user)

        response = self.client.patch(self.detail_url, {"is_active": False}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.client.force_authenticate(user=None)
        self.assertEqual(self.client.get(self.detail_url).status_code, status.HTTP_404_NOT_FOUND)

    def test_delete(self):
        self.client.force_authenticate(user=self.other_seller)
        forbidden = self.client.delete(self.detail_url)

        self.client.force_authenticate(user=self.seller)
        deleted = self.client.delete(self.detail_url)

        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(id=self.product.id).exists())

    def test_delete_product_with_orders_conflicts(self):
        OrderFactory(product=self.product)
        self.client.force_authenticate(user=self.seller)

        response = self.client.delete(self.detail_url)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"], "conflict")

    def test_search_and_categories(self):
        ProductFactory(name="Linen Scarf", category="Textiles")

        found = self.client.get(reverse("marketplace:product-search"), {"q": "scarf"})
        missing_query = self.client.get(reverse("marketplace:product-search"))
        categories = self.client.get(reverse("marketplace:product-categories"))

        self.assertEqual(found.status_code, status.HTTP_200_OK)
        self.assertEqual(found.data["count"], 1)
        self.assertEqual(missing_query.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(categories.data["categories"], ["Pottery", "Textiles"])

    def test_list_filters_and_bad_params(self):
        ProductFactory(seller=self.other_seller, price=Decimal("99.00"))

        cheap = self.client.get(self.list_url, {"max_price": "20"})
        bad_price = self.client.get(self.list_url, {"min_price": "cheap"})
        bad_page = self.client.get(self.list_url, {"page": "x"})

        self.assertEqual(cheap.data["count"], 1)
        self.assertEqual(bad_price.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(bad_page.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_listing_is_own_or_admin_only(self):
        ProductFactory(seller=self.seller, is_active=False)
        params = {"seller_id": str(self.seller.id), "is_active": "false"}

        self.client.force_authenticate(user=self.other_seller)
        forbidden = self.client.get(self.list_url, params)

        self.client.force_authenticate(user=self.seller)
        own = self.client.get(self.list_url, params)

        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(own.status_code, status.HTTP_200_OK)
        self.assertEqual(own.data["count"], 1)
