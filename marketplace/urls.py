from django.urls import include, path
from rest_framework.routers import DefaultRouter

from marketplace.api.views.metrics_views import prometheus_metrics
from marketplace.catalog.api.views import ProductViewSet
from marketplace.ordering.api.views import OrderViewSet

router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="product")
router.register(r"orders", OrderViewSet, basename="order")

app_name = "marketplace"

urlpatterns = [
    path("", include(router.urls)),
    # Prometheus scrape endpoint (all apps share the default registry)
    path("metrics/", prometheus_metrics, name="metrics"),
]
