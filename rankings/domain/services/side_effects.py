"""
Best-effort ranking updates triggered as a side effect of another operation.

The triggering operation has already committed by the time the ranking is
touched; a failed adjustment is logged and counted, never propagated.
"""

import logging

from rankings.infra.observability.metrics import ranking_side_effect_failures_total

logger = logging.getLogger(__name__)


def best_effort_ranking(source: str, operation, *args, **kwargs) -> bool:
    """
    Run a RankingService operation and swallow its failure.

    Args:
        source: Label of the triggering flow (e.g. "engagement.react")
        operation: Bound RankingService method returning a ServiceResult
        *args, **kwargs: Passed through to ``operation``

    Returns:
        True if the ranking was updated, False otherwise

    Example:
        >>> best_effort_ranking(
        ...     "engagement.react", ranking_service.apply_post_engagement_ranking, owner_id, "reaction"
        ... )
    """
    try:
        result = operation(*args, **kwargs)
    except Exception as e:
        logger.error(f"Ranking side effect from {source} raised: {e}", exc_info=True)
        ranking_side_effect_failures_total.labels(source=source).inc()
        return False

    if not result.ok:
        logger.error(f"Ranking side effect from {source} failed: {result.error} ({result.error_detail})")
        ranking_side_effect_failures_total.labels(source=source).inc()
        return False

    return True
