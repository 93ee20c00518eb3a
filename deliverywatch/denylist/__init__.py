"""Deny-list decisions for bounced addresses."""

from .engine import DenyListEngine, DenyListEntry

__all__ = [
    "DenyListEngine",
    "DenyListEntry",
]
