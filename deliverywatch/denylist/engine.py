"""Deny-list lookups and send-suppression decisions."""

from typing import Optional, Union

from sqlalchemy.orm import Session

from ..access import Actor, Capability, EntityKind, Forbidden, NotFound, require_actor, scoped_query
from ..database import AddressRepository, App, AppDenyList, DenyList
from ..query.pagination import Page, paginate
from ..utils import get_logger

logger = get_logger(__name__)

DenyListEntry = Union[DenyList, AppDenyList]


class DenyListEngine:
    """
    Read side of the deny list.

    Entries are created and removed by bounce processing; this class only
    answers whether an address is blocked and lists blocked addresses.
    Presence of an entry means sends are withheld. There is no partial or
    expiring state.

    Attributes:
        session: SQLAlchemy session
        addresses: Address repository used for lookup-only resolution

    Example:
        >>> engine = DenyListEngine(session)
        >>> entry = engine.lookup(actor, "bounce@example.com", app_id=3)
        >>> if entry:
        ...     print(f"Blocked since {entry.created_at}")
    """

    def __init__(self, session: Session):
        """
        Initialize engine with database session.

        Args:
            session: SQLAlchemy session
        """
        self.session = session
        self.addresses = AddressRepository(session)

    def require_app_list(self, actor: Optional[Actor], app_id: int) -> Actor:
        """
        Check that the actor may read an app's deny list.

        An app outside the actor's scope is reported exactly like a missing
        one. A visible app the actor is not a member of (the system app) is
        forbidden, so neither case can pass for "not blocked".

        Raises:
            Unauthorized: If there is no actor
            NotFound: If the app does not exist or is not visible
            Forbidden: If the app is visible but its deny list is not
        """
        actor = require_actor(actor)
        app = scoped_query(self.session, actor, EntityKind.APP).filter(App.id == app_id).first()
        if app is None:
            logger.info(f"Admin {actor.admin_id} asked for deny list of unknown app {app_id}")
            raise NotFound("App doesn't exist")
        if not (actor.can(Capability.VIEW_ALL) or actor.is_member_of(app.id)):
            logger.warning(f"Admin {actor.admin_id} denied deny list of app {app.id}")
            raise Forbidden()
        return actor

    def lookup(
        self,
        actor: Optional[Actor],
        address: str,
        app_id: Optional[int] = None
    ) -> DenyListEntry | None:
        """
        Find the entry blocking an address.

        With ``app_id`` only that app's entries are searched; without it
        only the global list is. A global entry never answers an app lookup.
        At most one entry is returned, the most recently created.

        Args:
            actor: Authenticated actor
            address: Address text
            app_id: App whose deny list to search

        Returns:
            Matching entry, or None if the address is not blocked

        Raises:
            Unauthorized: If there is no actor
            NotFound: If ``app_id`` names an app the actor cannot see
            Forbidden: If the actor cannot read that app's deny list
        """
        if app_id is not None:
            self.require_app_list(actor, app_id)
            query = scoped_query(self.session, actor, EntityKind.APP_DENY_LIST)
            model = AppDenyList
        else:
            query = scoped_query(self.session, actor, EntityKind.DENY_LIST)
            model = DenyList

        found = self.addresses.find(address)
        if found is None:
            return None

        query = query.filter(model.address_id == found.id)
        if app_id is not None:
            query = query.filter(AppDenyList.app_id == app_id)

        entry = query.order_by(model.created_at.desc(), model.id.desc()).first()
        logger.debug(f"Deny list lookup for {found.text} (app {app_id}): {'hit' if entry else 'miss'}")
        return entry

    def list(
        self,
        actor: Optional[Actor],
        app_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> Page[AppDenyList]:
        """
        App deny-list entries visible to the actor, newest first.

        Args:
            actor: Authenticated actor
            app_id: Only entries for this app
            limit: Maximum number of entries
            offset: Number of entries to skip

        Returns:
            Page of AppDenyList entries

        Raises:
            Unauthorized: If there is no actor
            NotFound: If ``app_id`` names an app the actor cannot see
            Forbidden: If the actor cannot read that app's deny list
        """
        query = scoped_query(self.session, actor, EntityKind.APP_DENY_LIST)
        if app_id is not None:
            self.require_app_list(actor, app_id)
            query = query.filter(AppDenyList.app_id == app_id)
        query = query.order_by(AppDenyList.created_at.desc(), AppDenyList.id.desc())
        return paginate(query, limit=limit, offset=offset)

    def is_withheld(self, address: str, app_id: int) -> bool:
        """
        Whether a send from an app to an address must be held back.

        Unscoped: this answers for the sending side, not for an admin.

        Args:
            address: Recipient address text
            app_id: Sending app

        Returns:
            True if the address is on the global list or on the app's list
        """
        found = self.addresses.find(address)
        if found is None:
            return False

        if self.session.query(DenyList.id).filter(DenyList.address_id == found.id).first():
            return True
        return self.session.query(AppDenyList.id).filter(
            AppDenyList.address_id == found.id,
            AppDenyList.app_id == app_id
        ).first() is not None
