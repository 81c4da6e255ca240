from prometheus_client import Counter


# Engagement writes by kind and action (created/deleted)
engagement_events_total = Counter(
    "engagement_events_total", "Engagement records created or deleted", ["kind", "action"]
)

# Writes rejected by a business rule
engagement_rejections_total = Counter(
    "engagement_rejections_total", "Engagement writes rejected", ["kind", "reason"]
)
