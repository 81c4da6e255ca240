from django.contrib import admin

from .models import Order, Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["name", "seller", "category", "price", "stock_quantity", "is_active", "created_at"]
    list_filter = ["is_active", "category"]
    search_fields = ["name", "seller__username"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ["id", "buyer", "product", "quantity", "total_price", "status", "created_at"]
    list_filter = ["status"]
    search_fields = ["id", "buyer__username", "product__name"]
    readonly_fields = ["quantity", "total_price", "created_at", "updated_at"]
