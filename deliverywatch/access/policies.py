"""Record-level policies for mutations on rows the actor can already see."""

from ..database.schema import App
from ..utils import get_logger
from .actor import Actor, Capability
from .errors import Forbidden

logger = get_logger(__name__)


def can_update_app(actor: Actor, app: App) -> bool:
    """
    Whether the actor may change an app's settings.

    The system app needs UPDATE_SYSTEM_APP. Other apps need UPDATE_APPS and
    either membership or unrestricted visibility.
    """
    if app.is_system:
        return actor.can(Capability.UPDATE_SYSTEM_APP)
    if not actor.can(Capability.UPDATE_APPS):
        return False
    return actor.can(Capability.VIEW_ALL) or actor.is_member_of(app.id)


def authorize_app_update(actor: Actor, app: App) -> None:
    """
    Raises:
        Forbidden: If the actor may not update the app
    """
    if not can_update_app(actor, app):
        logger.warning(f"Admin {actor.admin_id} may not update app {app.id}")
        raise Forbidden()
