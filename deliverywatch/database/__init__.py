"""Database models and access layer."""

from .database import Database
from .repository import AddressRepository, address_ids_matching
from .schema import (
    Address,
    Admin,
    AdminRole,
    App,
    AppDenyList,
    AppMembership,
    Base,
    Delivery,
    DeliveryStatus,
    DenyList,
    Email,
    MetaValue,
    PostfixLogLine,
    Team,
    normalize_address,
)

__all__ = [
    "Database",
    "AddressRepository",
    "address_ids_matching",
    "Base",
    "Team",
    "Admin",
    "AdminRole",
    "AppMembership",
    "App",
    "Address",
    "Email",
    "MetaValue",
    "Delivery",
    "DeliveryStatus",
    "PostfixLogLine",
    "DenyList",
    "AppDenyList",
    "normalize_address",
]
