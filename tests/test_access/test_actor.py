"""Tests for the identity and role model."""

import pytest

from deliverywatch.access import ROLE_CAPABILITIES, Actor, Capability, Role, Unauthorized, load_actor, require_actor


class TestRoleCapabilities:
    """Test the static role capability table."""

    def test_every_role_has_capabilities(self):
        """Test each role appears in the capability table."""
        assert set(ROLE_CAPABILITIES) == set(Role)

    def test_site_admin_has_every_capability(self):
        """Test site admins hold all capabilities."""
        assert ROLE_CAPABILITIES[Role.SITE_ADMIN] == frozenset(Capability)

    @pytest.mark.parametrize("role", [Role.TEAM_ADMIN, Role.APP_ADMIN])
    def test_other_roles_cannot_view_all(self, role):
        """Test non-site-admins are never unrestricted."""
        actor = Actor(admin_id=1, name="A", email="a@example.com", role=role)

        assert not actor.can(Capability.VIEW_ALL)
        assert not actor.can(Capability.LIST_TEAMS)
        assert actor.can(Capability.UPDATE_APPS)
        assert actor.is_site_admin is False


class TestActorFromAdmin:
    """Test building actors from admin rows."""

    def test_team_admin_gets_team_apps_and_direct_memberships(
        self, team_factory, app_factory, admin_factory, actor_for
    ):
        """Test team admins are members of team apps plus direct apps."""
        team = team_factory()
        other_team = team_factory(name="Other")
        team_app = app_factory(name="Team App", team=team)
        direct_app = app_factory(name="Direct App", team=other_team)
        app_factory(name="Unrelated", team=other_team)

        admin = admin_factory(role="team_admin", team=team, apps=[direct_app])
        actor = actor_for(admin)

        assert actor.role is Role.TEAM_ADMIN
        assert actor.app_ids == frozenset({team_app.id, direct_app.id})
        assert actor.team_id == team.id

    def test_app_admin_gets_direct_memberships_only(
        self, team_factory, app_factory, admin_factory, actor_for
    ):
        """Test app admins ignore their team's other apps."""
        team = team_factory()
        app_factory(name="Team App", team=team)
        direct_app = app_factory(name="Direct App", team=team)

        admin = admin_factory(role="app_admin", team=team, apps=[direct_app])
        actor = actor_for(admin)

        assert actor.app_ids == frozenset({direct_app.id})

    def test_actor_is_immutable(self, admin_factory, actor_for):
        """Test actors cannot be modified during a request."""
        actor = actor_for(admin_factory())

        with pytest.raises(Exception):
            actor.role = Role.SITE_ADMIN

    def test_load_actor(self, temp_db_session, admin_factory):
        """Test loading an actor by admin id."""
        admin = admin_factory(name="Loaded", role="site_admin")

        actor = load_actor(temp_db_session, admin.id)

        assert actor.admin_id == admin.id
        assert actor.name == "Loaded"
        assert actor.is_site_admin

    def test_load_actor_missing_admin(self, temp_db_session):
        """Test loading a nonexistent admin returns None."""
        assert load_actor(temp_db_session, 9999) is None


class TestRequireActor:
    """Test authentication enforcement."""

    def test_missing_actor_raises(self):
        """Test anonymous requests are rejected."""
        with pytest.raises(Unauthorized):
            require_actor(None)

    def test_actor_passes_through(self):
        """Test an authenticated actor is returned unchanged."""
        actor = Actor(admin_id=1, name="A", email="a@example.com", role=Role.APP_ADMIN)
        assert require_actor(actor) is actor
