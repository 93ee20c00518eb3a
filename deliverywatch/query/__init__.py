"""Delivery filtering, listing and pagination."""

from .deliveries import get_delivery, list_deliveries
from .filters import DELIVERY_ORDERING, DeliveryFilters, compile_filters, filter_fragments, filtered_deliveries
from .pagination import DEFAULT_LIMIT, DEFAULT_PAGE_SIZE, MAX_LIMIT, Page, clamp_window, paginate, paginate_page

__all__ = [
    "DeliveryFilters",
    "DELIVERY_ORDERING",
    "compile_filters",
    "filter_fragments",
    "filtered_deliveries",
    "list_deliveries",
    "get_delivery",
    "Page",
    "paginate",
    "paginate_page",
    "clamp_window",
    "DEFAULT_LIMIT",
    "DEFAULT_PAGE_SIZE",
    "MAX_LIMIT",
]
