"""Actors, scoping rules and access errors."""

from .actor import ROLE_CAPABILITIES, Actor, Capability, Role, actor_from_admin, load_actor, require_actor
from .errors import AccessError, Forbidden, NotFound, Unauthorized, ValidationFailed
from .policies import authorize_app_update, can_update_app
from .scopes import SCOPERS, EntityKind, Scoper, require_listable, scope, scoped_query

__all__ = [
    "Actor",
    "Role",
    "Capability",
    "ROLE_CAPABILITIES",
    "actor_from_admin",
    "load_actor",
    "require_actor",
    "AccessError",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "ValidationFailed",
    "can_update_app",
    "authorize_app_update",
    "EntityKind",
    "Scoper",
    "SCOPERS",
    "scope",
    "scoped_query",
    "require_listable",
]
