"""Delivery monitoring: scoped queries over outbound email and the deny list."""

__version__ = "0.1.0"
