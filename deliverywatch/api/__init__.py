"""Entry points for transport collaborators."""

from .app_update import AppUpdate
from .query_root import QueryResponse, QueryRoot

__all__ = [
    "QueryRoot",
    "QueryResponse",
    "AppUpdate",
]
