"""Query root: the entry points consumed by the typed query API and views."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..access import AccessError, Actor, EntityKind, NotFound, require_actor, require_listable, scoped_query
from ..database import Admin, App, Delivery, Team
from ..denylist import DenyListEngine, DenyListEntry
from ..query import DeliveryFilters, Page, filtered_deliveries, get_delivery, list_deliveries, paginate
from ..utils import Config, get_logger

logger = get_logger(__name__)


@dataclass
class QueryResponse:
    """
    Result of resolving one field: either data or a structured error.

    Attributes:
        data: Field value when resolution succeeded
        error: ``AccessError.to_dict()`` payload when it failed
    """

    data: Any = None
    error: Optional[dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class QueryRoot:
    """
    Root of every query an admin can make.

    Every field requires an authenticated actor. Collections are scoped by
    the policy scope engine before any filter or pagination is applied.

    Attributes:
        session: SQLAlchemy session for this request
        actor: Authenticated actor, or None for anonymous requests
        config: Application configuration

    Example:
        >>> with db.get_session() as session:
        ...     root = QueryRoot(session, load_actor(session, admin_id))
        ...     page = root.emails(status="bounced", limit=20)
        ...     print(f"{page.total} bounced deliveries")
    """

    FIELDS = (
        'email', 'emails', 'app', 'apps', 'teams', 'system_app', 'configuration',
        'admins', 'blocked_address', 'blocked_addresses', 'viewer',
        'deliveries', 'delivery',
    )

    def __init__(self, session: Session, actor: Optional[Actor], config: Optional[Config] = None):
        self.session = session
        self.actor = actor
        self.config = config or Config()

    def resolve(self, field: str, **arguments) -> QueryResponse:
        """
        Resolve a field by name, turning access errors into error payloads.

        Args:
            field: One of ``FIELDS``
            **arguments: Field arguments

        Returns:
            QueryResponse with data or error

        Raises:
            ValueError: If the field does not exist
        """
        if field not in self.FIELDS:
            raise ValueError(f"Unknown field: {field}")
        try:
            return QueryResponse(data=getattr(self, field)(**arguments))
        except AccessError as e:
            logger.info(f"Query.{field} failed with {e.code}: {e.message}")
            return QueryResponse(error=e.to_dict())

    def email(self, id: int) -> Delivery:
        """Find a single delivery."""
        return get_delivery(self.session, self.actor, id)

    def emails(
        self,
        app_id: Optional[int] = None,
        status: Optional[str] = None,
        since: Optional[datetime] = None,
        from_address: Optional[str] = None,
        to_address: Optional[str] = None,
        meta_key: Optional[str] = None,
        meta_value: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = 0
    ) -> Page[Delivery]:
        """
        Deliveries this admin has access to, most recent first.

        Returns:
            Page of deliveries
        """
        filters = DeliveryFilters(
            app_id=app_id,
            status=status,
            since=since,
            from_address=from_address,
            to_address=to_address,
            meta_key=meta_key,
            meta_value=meta_value,
        )
        return paginate(
            filtered_deliveries(self.session, self.actor, filters),
            limit=limit,
            offset=offset,
            max_limit=self.config.MAX_PAGE_SIZE,
            default_limit=self.config.DEFAULT_PAGE_SIZE,
        )

    def app(self, id: int) -> App:
        app = scoped_query(self.session, self.actor, EntityKind.APP).filter(App.id == id).first()
        if app is None:
            raise NotFound("App doesn't exist")
        return app

    def apps(self) -> list[App]:
        """Apps this admin has access to, sorted by name."""
        return scoped_query(self.session, self.actor, EntityKind.APP).order_by(App.name, App.id).all()

    def teams(self) -> list[Team]:
        """All teams. Only site admins may ask."""
        require_listable(self.actor, EntityKind.TEAM)
        return scoped_query(self.session, self.actor, EntityKind.TEAM).order_by(Team.name, Team.id).all()

    def system_app(self) -> App:
        """The app used to send this tool's own email."""
        require_actor(self.actor)
        app = self.session.query(App).filter(App.is_system.is_(True)).order_by(App.id).first()
        if app is None:
            raise NotFound("System app has not been set up")
        return app

    def configuration(self) -> dict[str, Any]:
        require_actor(self.actor)
        return self.config.public_settings()

    def admins(self) -> list[Admin]:
        """Admins this admin has access to, sorted by name."""
        return scoped_query(self.session, self.actor, EntityKind.ADMIN).order_by(Admin.name, Admin.id).all()

    def blocked_address(self, address: str, app_id: Optional[int] = None) -> DenyListEntry | None:
        """Deny-list entry blocking an address, or None if it is not blocked."""
        return DenyListEngine(self.session).lookup(self.actor, address, app_id=app_id)

    def blocked_addresses(
        self,
        app_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = 0
    ) -> Page:
        """Addresses whose bounces hold back further email, newest first."""
        return DenyListEngine(self.session).list(self.actor, app_id=app_id, limit=limit, offset=offset)

    def viewer(self) -> Admin:
        """The currently authenticated admin."""
        actor = require_actor(self.actor)
        admin = scoped_query(self.session, actor, EntityKind.ADMIN).filter(
            Admin.id == actor.admin_id
        ).first()
        if admin is None:
            raise NotFound("Admin doesn't exist")
        return admin

    def deliveries(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        app_id: Optional[int] = None,
        page: Optional[int] = 1
    ) -> Page[Delivery]:
        """Listing-view page of deliveries."""
        return list_deliveries(
            self.session,
            self.actor,
            search=search,
            status=status,
            app_id=app_id,
            page=page,
            page_size=self.config.DELIVERIES_PER_PAGE,
        )

    def delivery(self, id: int) -> Delivery:
        """Detail-view lookup of a delivery."""
        return get_delivery(self.session, self.actor, id)
