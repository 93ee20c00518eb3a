"""Delivery listing and detail lookups for the record views."""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ..access import Actor, EntityKind, NotFound, scoped_query
from ..database import Delivery
from ..utils import get_logger
from .filters import DeliveryFilters, filtered_deliveries
from .pagination import DEFAULT_PAGE_SIZE, Page, paginate_page

logger = get_logger(__name__)


def _with_details(query):
    return query.options(
        selectinload(Delivery.email),
        selectinload(Delivery.address),
        selectinload(Delivery.postfix_log_lines),
    )


def list_deliveries(
    session: Session,
    actor: Optional[Actor],
    search: Optional[str] = None,
    status: Optional[str] = None,
    app_id: Optional[int] = None,
    page: Optional[int] = 1,
    page_size: int = DEFAULT_PAGE_SIZE
) -> Page[Delivery]:
    """
    Page of deliveries for the listing view, newest first.

    Args:
        session: SQLAlchemy session
        actor: Authenticated actor
        search: Recipient address to search for (overrides other filters)
        status: Delivery status filter
        app_id: App filter
        page: 1-based page number
        page_size: Deliveries per page

    Returns:
        Page of deliveries with email, address and log lines loaded

    Raises:
        Unauthorized: If there is no actor
    """
    filters = DeliveryFilters(search=search, status=status, app_id=app_id)
    query = _with_details(filtered_deliveries(session, actor, filters))
    return paginate_page(query, page=page, page_size=page_size)


def get_delivery(session: Session, actor: Optional[Actor], delivery_id: int) -> Delivery:
    """
    Single delivery visible to the actor.

    Args:
        session: SQLAlchemy session
        actor: Authenticated actor
        delivery_id: Delivery id

    Returns:
        Delivery with details loaded

    Raises:
        Unauthorized: If there is no actor
        NotFound: If the delivery does not exist or is outside the actor's scope
    """
    delivery = _with_details(scoped_query(session, actor, EntityKind.DELIVERY)).filter(
        Delivery.id == delivery_id
    ).first()
    if delivery is None:
        logger.info(f"Delivery {delivery_id} not found for admin {actor.admin_id}")
        raise NotFound("Email doesn't exist")
    return delivery
