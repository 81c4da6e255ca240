import uuid
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from marketplace.catalog.domain.services import ProductService
from marketplace.models import Product
from utils.service_base import ErrorCodes


def _product(seller_id):
    product = Mock(spec=Product)
    product.seller_id = seller_id
    product.is_active = True
    product.name = "Test Product"
    return product


@pytest.mark.unit
class TestProductValidationUnit:
    def setup_method(self):
        self.service = ProductService()
        self.seller = Mock(id=uuid.uuid4(), is_authenticated=True)

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "Mug", "price": "-1.00"},
            {"name": "Mug", "price": "NaN"},
            {"name": "Mug", "price": "abc"},
            {"name": "Mug", "price": "1.005"},
            {"name": "   ", "price": "1.00"},
            {"name": "Mug", "price": "1.00", "description": "  "},
            {"name": "Mug", "price": "1.00", "stock_quantity": -1},
            {"name": "Mug", "price": "1.00", "stock_quantity": True},
            {"name": "Mug", "price": "1.00", "category": "x" * 51},
        ],
    )
    @patch("marketplace.models.Product.objects.create")
    def test_create_rejects_invalid_data(self, mock_create, data):
        result = self.service.create_product(self.seller, data)

        assert result.error == ErrorCodes.VALIDATION_ERROR
        mock_create.assert_not_called()

    @patch("marketplace.models.Product.objects.create")
    def test_create_normalizes_fields(self, mock_create):
        mock_create.return_value = _product(self.seller.id)

        result = self.service.create_product(
            self.seller, {"name": "  Mug ", "price": "12.50", "category": " Pottery ", "unknown": "dropped"}
        )

        assert result.ok
        mock_create.assert_called_once_with(
            seller=self.seller, name="Mug", price=Decimal("12.50"), category="Pottery"
        )

    def test_update_rejects_negative_stock_before_loading(self):
        with patch.object(ProductService, "_get") as mock_get:
            result = self.service.update_product(uuid.uuid4(), self.seller, {"stock_quantity": -3})

        assert result.error == ErrorCodes.VALIDATION_ERROR
        mock_get.assert_not_called()


@pytest.mark.unit
@pytest.mark.django_db
class TestProductOwnershipUnit:
    def setup_method(self):
        self.service = ProductService()
        self.seller = Mock(id=uuid.uuid4(), is_authenticated=True)
        self.stranger = Mock(id=uuid.uuid4(), is_authenticated=True)

    def test_stranger_cannot_update(self):
        product = _product(self.seller.id)
        with patch.object(ProductService, "_get", return_value=product):
            result = self.service.update_product(uuid.uuid4(), self.stranger, {"price": "1.00"})

        assert result.error == ErrorCodes.PERMISSION_DENIED
        product.save.assert_not_called()

    def test_admin_may_update_any_product(self):
        product = _product(self.seller.id)
        with patch.object(ProductService, "_get", return_value=product):
            result = self.service.update_product(uuid.uuid4(), self.stranger, {"price": "1.00"}, is_admin=True)

        assert result.ok
        assert product.price == Decimal("1.00")
        product.save.assert_called_once_with(update_fields=["price", "updated_at"])

    def test_stranger_cannot_delete(self):
        product = _product(self.seller.id)
        with patch.object(ProductService, "_get", return_value=product):
            result = self.service.delete_product(uuid.uuid4(), self.stranger)

        assert result.error == ErrorCodes.PERMISSION_DENIED
        product.delete.assert_not_called()

    def test_missing_product(self):
        with patch.object(ProductService, "_get", return_value=None):
            result = self.service.delete_product(uuid.uuid4(), self.seller)

        assert result.error == ErrorCodes.PRODUCT_NOT_FOUND
