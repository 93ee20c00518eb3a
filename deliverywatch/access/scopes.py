"""
Policy scope engine.

``scope(actor, kind)`` returns a SQLAlchemy boolean clause restricting a
collection of ``kind`` to the rows the actor may read. Scopes are pure:
they read only the immutable Actor and never touch the database.

Each entity kind has exactly one Scoper, registered in ``SCOPERS``. The
registry is checked against ``EntityKind`` at import time, so adding a
kind without a scoper fails immediately.
"""

from abc import ABC, abstractmethod
from enum import Enum

from sqlalchemy import false, or_, select, true
from sqlalchemy.orm import Query, Session

from ..database.schema import Admin, App, AppDenyList, Delivery, DenyList, Team
from ..utils import get_logger
from .actor import Actor, Capability, require_actor
from .errors import Unauthorized

logger = get_logger(__name__)


class EntityKind(str, Enum):
    """Kinds of entity an actor can query."""

    APP = 'app'
    TEAM = 'team'
    ADMIN = 'admin'
    DELIVERY = 'delivery'
    DENY_LIST = 'deny_list'
    APP_DENY_LIST = 'app_deny_list'


class Scoper(ABC):
    """
    Scope rules for one entity kind.

    Site admins see everything; subclasses only describe what everyone
    else sees.
    """

    model: type

    def predicate(self, actor: Actor):
        """Clause restricting ``model`` rows to those visible to the actor."""
        if actor.can(Capability.VIEW_ALL):
            return true()
        return self.visible(actor)

    @abstractmethod
    def visible(self, actor: Actor):
        """Clause for actors without unrestricted visibility."""

    def check_listable(self, actor: Actor) -> None:
        """Raise Unauthorized if the actor may not list this kind at all."""


class AppScoper(Scoper):
    """Member apps, plus the system app which every admin can see."""

    model = App

    def visible(self, actor: Actor):
        return or_(App.id.in_(sorted(actor.app_ids)), App.is_system.is_(True))


class TeamScoper(Scoper):
    model = Team

    def visible(self, actor: Actor):
        return false()

    def check_listable(self, actor: Actor) -> None:
        if not actor.can(Capability.LIST_TEAMS):
            raise Unauthorized("Not authorized to access teams")


class AdminScoper(Scoper):
    """Other admins are visible to site admins only; everyone sees themself."""

    model = Admin

    def visible(self, actor: Actor):
        return Admin.id == actor.admin_id


class DeliveryScoper(Scoper):
    model = Delivery

    def visible(self, actor: Actor):
        return Delivery.app_id.in_(sorted(actor.app_ids))


class DenyListScoper(Scoper):
    """
    Global entries have no owning app. An entry caused by a delivery is
    visible only to admins who can see that delivery; entries with no
    recorded cause are visible to every admin.
    """

    model = DenyList

    def visible(self, actor: Actor):
        return or_(
            DenyList.caused_by_delivery_id.is_(None),
            DenyList.caused_by_delivery_id.in_(
                select(Delivery.id).where(Delivery.app_id.in_(sorted(actor.app_ids)))
            ),
        )


class AppDenyListScoper(Scoper):
    model = AppDenyList

    def visible(self, actor: Actor):
        return AppDenyList.app_id.in_(sorted(actor.app_ids))


SCOPERS: dict[EntityKind, Scoper] = {
    EntityKind.APP: AppScoper(),
    EntityKind.TEAM: TeamScoper(),
    EntityKind.ADMIN: AdminScoper(),
    EntityKind.DELIVERY: DeliveryScoper(),
    EntityKind.DENY_LIST: DenyListScoper(),
    EntityKind.APP_DENY_LIST: AppDenyListScoper(),
}

_missing = set(EntityKind) - set(SCOPERS)
if _missing:
    raise RuntimeError(f"No scoper registered for: {sorted(k.value for k in _missing)}")


def scoper_for(kind: EntityKind) -> Scoper:
    return SCOPERS[EntityKind(kind)]


def scope(actor: Actor | None, kind: EntityKind):
    """
    Scoping predicate for an actor and entity kind.

    Args:
        actor: Authenticated actor (None for anonymous requests)
        kind: Entity kind being queried

    Returns:
        SQLAlchemy boolean clause over the kind's model

    Raises:
        Unauthorized: If there is no actor

    Example:
        >>> session.query(Delivery).filter(scope(actor, EntityKind.DELIVERY))
    """
    actor = require_actor(actor)
    return scoper_for(kind).predicate(actor)


def require_listable(actor: Actor | None, kind: EntityKind) -> Actor:
    """
    Check that the actor may list this kind of entity at all.

    Raises:
        Unauthorized: If there is no actor or the kind is denied outright
    """
    actor = require_actor(actor)
    try:
        scoper_for(kind).check_listable(actor)
    except Unauthorized:
        logger.warning(f"Admin {actor.admin_id} denied listing of {EntityKind(kind).value}")
        raise
    return actor


def scoped_query(session: Session, actor: Actor | None, kind: EntityKind) -> Query:
    """
    Session query of the kind's model restricted to the actor's scope.

    Args:
        session: SQLAlchemy session
        actor: Authenticated actor
        kind: Entity kind

    Returns:
        Unordered, unpaginated SQLAlchemy Query
    """
    scoper = scoper_for(kind)
    return session.query(scoper.model).filter(scope(actor, kind))
