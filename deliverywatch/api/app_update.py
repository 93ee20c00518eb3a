"""Guarded update of an app's display and tracking settings."""

import re
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..access import Actor, EntityKind, NotFound, ValidationFailed, authorize_app_update, require_actor, scoped_query
from ..database import App
from ..utils import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = (
    'name',
    'open_tracking_enabled',
    'click_tracking_enabled',
    'custom_tracking_domain',
    'from_domain',
)

DOMAIN_PATTERN = re.compile(
    r'^(?=.{1,253}$)([a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$',
    re.IGNORECASE
)


class AppUpdate:
    """
    Update selected settings of one app on behalf of an admin.

    Apps outside the admin's read scope raise NotFound, exactly as if they
    did not exist. Apps the admin can see but may not change raise
    Forbidden.

    Attributes:
        session: SQLAlchemy session
        actor: Admin performing the update
        app_id: App to update
        changes: Field name to new value; only these fields are touched

    Example:
        >>> app = AppUpdate(session, actor, 3, name="Newsletters").call()
    """

    def __init__(self, session: Session, actor: Optional[Actor], app_id: int, **changes: Any):
        self.session = session
        self.actor = actor
        self.app_id = app_id
        self.changes = changes

    def call(self) -> App:
        """
        Apply the changes.

        Returns:
            Updated App (flushed, committed by the session owner)

        Raises:
            Unauthorized: If there is no actor
            NotFound: If the app is not visible to the actor
            Forbidden: If the actor may not update the app
            ValidationFailed: If any change is invalid
        """
        actor = require_actor(self.actor)
        app = scoped_query(self.session, actor, EntityKind.APP).filter(App.id == self.app_id).first()
        if app is None:
            raise NotFound("App doesn't exist")
        authorize_app_update(actor, app)

        errors = self.validate()
        if errors:
            raise ValidationFailed("Save failed", details=errors)

        for name, value in self.changes.items():
            setattr(app, name, value)
        self.session.flush()

        logger.info(f"Admin {actor.admin_id} updated app {app.id}: {sorted(self.changes)}")
        return app

    def validate(self) -> dict[str, str]:
        """Field name to error message for every invalid change."""
        errors = {}
        for name, value in self.changes.items():
            if name not in UPDATABLE_FIELDS:
                errors[name] = "is not an updatable field"
            elif name == 'name':
                if not value or not str(value).strip():
                    errors[name] = "can't be blank"
            elif name in ('open_tracking_enabled', 'click_tracking_enabled'):
                if not isinstance(value, bool):
                    errors[name] = "must be true or false"
            elif value is not None and not DOMAIN_PATTERN.match(str(value)):
                errors[name] = "is not a valid domain"
        return errors
