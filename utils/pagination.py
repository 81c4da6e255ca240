from typing import Dict

MAX_PAGE_SIZE = 100


def paginate(queryset, page: int = 1, page_size: int = 20) -> Dict:
    """
    Slice an ordered queryset into one page.

    ``page`` is clamped to at least 1 and ``page_size`` to 1..MAX_PAGE_SIZE.

    Returns:
        {"results", "count", "page", "page_size", "num_pages"}
    """
    page = max(int(page), 1)
    page_size = min(max(int(page_size), 1), MAX_PAGE_SIZE)

    offset = (page - 1) * page_size
    total_count = queryset.count()
    results = list(queryset[offset : offset + page_size])

    return {
        "results": results,
        "count": total_count,
        "page": page,
        "page_size": page_size,
        "num_pages": (total_count + page_size - 1) // page_size,
    }


def pagination_params(request, default_page_size: int = 20):
    """Read ``page``/``page_size`` query params; raises ValueError on non-integers."""
    page = int(request.query_params.get("page", 1))
    page_size = int(request.query_params.get("page_size", default_page_size))
    return page, page_size
