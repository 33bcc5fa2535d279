# utils/utils.py

import math

# =============================================================================
# CORE UTILITY HELPER FUNCTIONS
# =============================================================================

def parse_filters(request, filter_keys):
    """
    Extract filter values from request.GET.
    filter_keys: list of filter names to extract
    Returns dict: {key: value or None}
    """
    filters = {}
    for key in filter_keys:
        value = request.GET.get(key, '').strip()
        filters[key] = value if value else None
    return filters

def slice_page(queryset, page=1, limit=10):
    """
    Apply skip/take paging to a queryset.

    Returns:
        tuple: (list of rows, pagination dict with total, total_pages, current_page)
    """
    try:
        page = max(int(page or 1), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = max(int(limit or 10), 1)
    except (TypeError, ValueError):
        limit = 10

    total = queryset.count()
    offset = (page - 1) * limit
    rows = list(queryset[offset:offset + limit])

    return rows, {
        'total': total,
        'total_pages': math.ceil(total / limit),
        'current_page': page,
    }
