"""
Delivery filter compiler.

Each filter key becomes an independent predicate fragment. Fragments are
combined by a single ``and_`` at the end, so the result does not depend on
the order in which keys are examined.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import and_, false, select, true
from sqlalchemy.orm import Query, Session

from ..access import Actor, EntityKind, scoped_query
from ..database import Delivery, DeliveryStatus, Email, MetaValue, address_ids_matching
from ..utils import get_logger

logger = get_logger(__name__)

DELIVERY_ORDERING = (Delivery.created_at.desc(), Delivery.id.desc())


@dataclass(frozen=True)
class DeliveryFilters:
    """
    Optional criteria for narrowing a delivery listing.

    Attributes:
        app_id: Only deliveries sent by this app
        status: Only deliveries with this status
        since: Only deliveries created strictly after this time
        from_address: Only deliveries of emails sent from this address
        to_address: Only deliveries to this recipient address
        meta_key: Only deliveries whose email has metadata with this key
        meta_value: Only deliveries whose email has metadata with this value
        search: Free-text recipient search; when set, every other key is ignored
    """

    app_id: Optional[int] = None
    status: Optional[Union[DeliveryStatus, str]] = None
    since: Optional[datetime] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    meta_key: Optional[str] = None
    meta_value: Optional[str] = None
    search: Optional[str] = None

    def present(self) -> list[str]:
        """Names of the keys that were supplied."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]


def _search_fragment(text: str):
    return Delivery.address_id.in_(address_ids_matching(text))


def _app_fragment(app_id: int):
    return and_(
        Delivery.app_id == app_id,
        Delivery.email_id.in_(select(Email.id).where(Email.app_id == app_id)),
    )


def _status_fragment(status):
    try:
        return Delivery.status == DeliveryStatus(status).value
    except ValueError:
        logger.debug(f"Unknown delivery status {status!r}, filter matches nothing")
        return false()


def _from_fragment(text: str):
    return Delivery.email_id.in_(
        select(Email.id).where(Email.from_address_id.in_(address_ids_matching(text)))
    )


def _to_fragment(text: str):
    return Delivery.address_id.in_(address_ids_matching(text))


def _meta_key_fragment(key: str):
    return Delivery.email_id.in_(select(MetaValue.email_id).where(MetaValue.key == key))


def _meta_value_fragment(value: str):
    return Delivery.email_id.in_(select(MetaValue.email_id).where(MetaValue.value == value))


def filter_fragments(filters: DeliveryFilters) -> list:
    """
    Independent predicates for each supplied filter key.

    Args:
        filters: Filter criteria

    Returns:
        List of SQLAlchemy clauses, empty when no keys are supplied
    """
    if filters.search is not None:
        return [_search_fragment(filters.search)]

    fragments = []
    if filters.app_id is not None:
        fragments.append(_app_fragment(filters.app_id))
    if filters.status is not None:
        fragments.append(_status_fragment(filters.status))
    if filters.since is not None:
        fragments.append(Delivery.created_at > filters.since)
    if filters.from_address is not None:
        fragments.append(_from_fragment(filters.from_address))
    if filters.to_address is not None:
        fragments.append(_to_fragment(filters.to_address))
    if filters.meta_key is not None:
        fragments.append(_meta_key_fragment(filters.meta_key))
    if filters.meta_value is not None:
        fragments.append(_meta_value_fragment(filters.meta_value))
    return fragments


def compile_filters(filters: DeliveryFilters):
    """
    Compile delivery filters into one predicate.

    Malformed input never raises: an unknown status or an address that has
    never been seen simply matches no deliveries.

    Args:
        filters: Filter criteria

    Returns:
        SQLAlchemy boolean clause over Delivery

    Example:
        >>> predicate = compile_filters(DeliveryFilters(status="bounced", app_id=5))
        >>> session.query(Delivery).filter(predicate).all()
    """
    fragments = filter_fragments(filters)
    if not fragments:
        return true()
    return and_(*fragments)


def filtered_deliveries(session: Session, actor: Actor | None, filters: DeliveryFilters) -> Query:
    """
    Deliveries visible to the actor and matching the filters, newest first.

    Args:
        session: SQLAlchemy session
        actor: Authenticated actor
        filters: Filter criteria

    Returns:
        Ordered SQLAlchemy Query, not yet paginated

    Raises:
        Unauthorized: If there is no actor
    """
    logger.debug(f"Filtering deliveries on {filters.present()}")
    return scoped_query(session, actor, EntityKind.DELIVERY).filter(
        compile_filters(filters)
    ).order_by(*DELIVERY_ORDERING)

