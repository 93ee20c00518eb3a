"""Identity and role model for authenticated admins."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from ..database.schema import Admin, AdminRole, App, AppMembership
from ..utils import get_logger
from .errors import Unauthorized

logger = get_logger(__name__)

Role = AdminRole


class Capability(str, Enum):
    """Static capabilities granted by a role."""

    VIEW_ALL = 'view_all'
    LIST_TEAMS = 'list_teams'
    LIST_ADMINS = 'list_admins'
    UPDATE_APPS = 'update_apps'
    UPDATE_SYSTEM_APP = 'update_system_app'


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.SITE_ADMIN: frozenset(Capability),
    Role.TEAM_ADMIN: frozenset({Capability.UPDATE_APPS}),
    Role.APP_ADMIN: frozenset({Capability.UPDATE_APPS}),
}


@dataclass(frozen=True)
class Actor:
    """
    An authenticated admin performing a request.

    Built once per request and never mutated. ``app_ids`` holds every app
    the admin is a member of, directly or through their team.

    Attributes:
        admin_id: Id of the Admin row
        name: Display name
        email: Login email
        role: Role of the admin
        team_id: Team the admin belongs to, if any
        app_ids: Ids of apps the admin is a member of

    Example:
        >>> actor = load_actor(session, admin_id=3)
        >>> actor.is_member_of(1)
        True
    """

    admin_id: int
    name: str
    email: str
    role: Role
    team_id: Optional[int] = None
    app_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def is_site_admin(self) -> bool:
        return self.role is Role.SITE_ADMIN

    @property
    def capabilities(self) -> frozenset[Capability]:
        return ROLE_CAPABILITIES[self.role]

    def can(self, capability: Capability) -> bool:
        """Whether the actor's role grants the capability."""
        return capability in self.capabilities

    def is_member_of(self, app_id: int) -> bool:
        return app_id in self.app_ids


def actor_from_admin(session: Session, admin: Admin) -> Actor:
    """
    Build an Actor from an Admin row, resolving app memberships.

    Team admins are members of every app their team owns plus any direct
    memberships. App admins only have their direct memberships.

    Args:
        session: SQLAlchemy session
        admin: Admin row

    Returns:
        Actor for the admin
    """
    role = Role(admin.role)

    app_ids = {
        app_id for (app_id,) in session.query(AppMembership.app_id).filter(
            AppMembership.admin_id == admin.id
        )
    }
    if role is not Role.APP_ADMIN and admin.team_id is not None:
        app_ids |= {
            app_id for (app_id,) in session.query(App.id).filter(App.team_id == admin.team_id)
        }

    return Actor(
        admin_id=admin.id,
        name=admin.name,
        email=admin.email,
        role=role,
        team_id=admin.team_id,
        app_ids=frozenset(app_ids),
    )


def load_actor(session: Session, admin_id: int) -> Actor | None:
    """
    Load the Actor for an admin id supplied by the authentication layer.

    Args:
        session: SQLAlchemy session
        admin_id: Authenticated admin's id

    Returns:
        Actor, or None if the admin does not exist
    """
    admin = session.query(Admin).filter(Admin.id == admin_id).first()
    if admin is None:
        logger.warning(f"No admin found for id {admin_id}")
        return None
    return actor_from_admin(session, admin)


def require_actor(actor: Actor | None) -> Actor:
    """
    Ensure a request is authenticated.

    Raises:
        Unauthorized: If there is no actor
    """
    if actor is None:
        raise Unauthorized("Authentication required")
    return actor
