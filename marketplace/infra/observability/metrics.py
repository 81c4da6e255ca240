from prometheus_client import Counter, Histogram


# Order Metrics
orders_placed_total = Counter("marketplace_orders_placed_total", "Order creation attempts", ["status"])
order_value = Histogram(
    "marketplace_order_value",
    "Order value distribution",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, float("inf")],
)
order_status_transitions_total = Counter(
    "marketplace_order_status_transitions_total", "Order status changes", ["from_status", "to_status"]
)
order_transition_rejections_total = Counter(
    "marketplace_order_transition_rejections_total", "Rejected order status changes", ["reason"]
)

# Stock Metrics
stock_adjustment_failures = Counter("marketplace_stock_adjustment_failure", "Stock adjustment failures")

# Performance Metrics
order_creation_duration = Histogram("marketplace_order_creation_seconds", "Order creation time")

# Catalog Metrics
product_operations_total = Counter(
    "marketplace_product_operations_total", "Product create/update/delete outcomes", ["operation", "status"]
)
