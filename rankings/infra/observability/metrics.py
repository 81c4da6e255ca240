from prometheus_client import Counter, Histogram


# Score adjustments
ranking_adjustments_total = Counter(
    "rankings_adjustments_total", "Score adjustments applied", ["category", "status"]
)
ranking_adjustment_delta = Histogram(
    "rankings_adjustment_delta",
    "Absolute size of applied score deltas",
    buckets=[1, 3, 5, 10, 25, 50, 100, 500, float("inf")],
)

# Best-effort side effects that were dropped
ranking_side_effect_failures_total = Counter(
    "rankings_side_effect_failures_total", "Ranking updates dropped after a primary action", ["source"]
)
