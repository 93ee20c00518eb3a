"""Shared test fixtures for all test modules."""

import uuid
from collections.abc import Generator
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from deliverywatch.access import Actor, actor_from_admin
from deliverywatch.database import (
    AddressRepository,
    Admin,
    AdminRole,
    App,
    AppDenyList,
    AppMembership,
    Base,
    Database,
    Delivery,
    DenyList,
    Email,
    MetaValue,
    PostfixLogLine,
    Team,
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def temp_db(tmp_path: Path) -> Generator[Database, None, None]:
    """
    Create a temporary test database with schema initialized.

    Usage:
        def test_something(temp_db):
            with temp_db.get_session() as session:
                # Use session
    """
    db_path = tmp_path / "test.db"
    db = Database(str(db_path))

    Base.metadata.create_all(db.engine)

    yield db

    db.engine.dispose()


@pytest.fixture
def temp_db_session(temp_db: Database) -> Generator[Session, None, None]:
    """
    Create a database session for testing.

    Usage:
        def test_something(temp_db_session):
            temp_db_session.add(App(name="Newsletters"))
            temp_db_session.commit()
    """
    with temp_db.get_session() as session:
        yield session


# ============================================================================
# Factory Fixtures
# ============================================================================

@pytest.fixture
def team_factory(temp_db_session: Session):
    """
    Factory for creating test teams.

    Usage:
        def test_something(team_factory):
            team = team_factory(name="Acme")
    """
    def _create_team(name: str = "Test Team") -> Team:
        team = Team(name=name)
        temp_db_session.add(team)
        temp_db_session.commit()
        return team

    return _create_team


@pytest.fixture
def app_factory(temp_db_session: Session):
    """
    Factory for creating test apps.

    Usage:
        def test_something(app_factory, team_factory):
            app = app_factory(name="Newsletters", team=team_factory())
    """
    def _create_app(
        name: str = "Test App",
        team: Team = None,
        is_system: bool = False,
        **kwargs
    ) -> App:
        app = App(
            name=name,
            team_id=team.id if team else None,
            is_system=is_system,
            **kwargs
        )
        temp_db_session.add(app)
        temp_db_session.commit()
        return app

    return _create_app


@pytest.fixture
def admin_factory(temp_db_session: Session):
    """
    Factory for creating test admins.

    Usage:
        def test_something(admin_factory, app_factory):
            app = app_factory()
            admin = admin_factory(role="app_admin", apps=[app])
    """
    def _create_admin(
        name: str = "Test Admin",
        email: str = None,
        role: str = AdminRole.TEAM_ADMIN.value,
        team: Team = None,
        apps: list[App] = None
    ) -> Admin:
        if email is None:
            email = f"admin_{uuid.uuid4().hex[:8]}@example.com"

        admin = Admin(
            name=name,
            email=email,
            role=AdminRole(role).value,
            team_id=team.id if team else None,
        )
        temp_db_session.add(admin)
        temp_db_session.flush()

        for app in apps or []:
            temp_db_session.add(AppMembership(admin_id=admin.id, app_id=app.id))

        temp_db_session.commit()
        return admin

    return _create_admin


@pytest.fixture
def actor_for(temp_db_session: Session):
    """
    Build the request Actor for an admin row.

    Usage:
        def test_something(actor_for, admin_factory):
            actor = actor_for(admin_factory())
    """
    def _actor_for(admin: Admin) -> Actor:
        return actor_from_admin(temp_db_session, admin)

    return _actor_for


@pytest.fixture
def email_factory(temp_db_session: Session):
    """
    Factory for creating test emails, with optional metadata.

    Usage:
        def test_something(email_factory, app_factory):
            email = email_factory(app_factory(), meta={"campaign": "spring"})
    """
    def _create_email(
        app: App,
        from_address: str = "sender@example.com",
        subject: str = "Test Email",
        meta: dict[str, str] = None,
        created_at: datetime = None
    ) -> Email:
        sender = AddressRepository(temp_db_session).find_or_create(from_address)
        email = Email(
            app_id=app.id,
            from_address_id=sender.id,
            subject=subject,
            created_at=created_at or BASE_TIME,
        )
        temp_db_session.add(email)
        temp_db_session.flush()

        for key, value in (meta or {}).items():
            temp_db_session.add(MetaValue(email_id=email.id, key=key, value=value))

        temp_db_session.commit()
        return email

    return _create_email


@pytest.fixture
def delivery_factory(temp_db_session: Session, email_factory):
    """
    Factory for creating test deliveries.

    Each call creates its own email unless one is given. ``minutes`` offsets
    ``created_at`` from a fixed base time so ordering is deterministic.

    Usage:
        def test_something(delivery_factory, app_factory):
            delivery = delivery_factory(app_factory(), status="bounced", minutes=5)
    """
    def _create_delivery(
        app: App,
        to: str = "recipient@example.com",
        status: str = "sent",
        minutes: int = 0,
        created_at: datetime = None,
        email: Email = None,
        from_address: str = "sender@example.com",
        meta: dict[str, str] = None,
        app_id: int = None
    ) -> Delivery:
        if created_at is None:
            created_at = BASE_TIME + timedelta(minutes=minutes)
        if email is None:
            email = email_factory(app, from_address=from_address, meta=meta, created_at=created_at)

        recipient = AddressRepository(temp_db_session).find_or_create(to)
        delivery = Delivery(
            email_id=email.id,
            app_id=app_id if app_id is not None else app.id,
            address_id=recipient.id,
            status=status,
            created_at=created_at,
        )
        temp_db_session.add(delivery)
        temp_db_session.commit()
        return delivery

    return _create_delivery


@pytest.fixture
def log_line_factory(temp_db_session: Session):
    """Factory for postfix log lines attached to a delivery."""
    def _create_log_line(
        delivery: Delivery,
        dsn: str = "2.0.0",
        minutes: int = 0,
        relay: str = "mx.example.com[10.0.0.1]:25",
        extended_status: str = "sent (250 2.0.0 OK)"
    ) -> PostfixLogLine:
        line = PostfixLogLine(
            delivery_id=delivery.id,
            time=BASE_TIME + timedelta(minutes=minutes),
            relay=relay,
            delay=0.5,
            delays="0.1/0/0.2/0.2",
            dsn=dsn,
            extended_status=extended_status,
        )
        temp_db_session.add(line)
        temp_db_session.commit()
        return line

    return _create_log_line


@pytest.fixture
def deny_list_factory(temp_db_session: Session):
    """
    Factory for global deny-list entries.

    Usage:
        def test_something(deny_list_factory):
            entry = deny_list_factory("bounce@example.com")
    """
    def _create_entry(
        address: str,
        minutes: int = 0,
        bounce_count: int = 1,
        caused_by: Delivery = None
    ) -> DenyList:
        found = AddressRepository(temp_db_session).find_or_create(address)
        entry = DenyList(
            address_id=found.id,
            bounce_count=bounce_count,
            caused_by_delivery_id=caused_by.id if caused_by else None,
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        temp_db_session.add(entry)
        temp_db_session.commit()
        return entry

    return _create_entry


@pytest.fixture
def app_deny_list_factory(temp_db_session: Session):
    """
    Factory for per-app deny-list entries.

    Usage:
        def test_something(app_deny_list_factory, app_factory):
            entry = app_deny_list_factory(app_factory(), "bounce@example.com")
    """
    def _create_entry(
        app: App,
        address: str,
        minutes: int = 0,
        bounce_count: int = 1,
        caused_by: Delivery = None
    ) -> AppDenyList:
        found = AddressRepository(temp_db_session).find_or_create(address)
        entry = AppDenyList(
            app_id=app.id,
            address_id=found.id,
            bounce_count=bounce_count,
            caused_by_delivery_id=caused_by.id if caused_by else None,
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        temp_db_session.add(entry)
        temp_db_session.commit()
        return entry

    return _create_entry


# ============================================================================
# Scenario Fixtures
# ============================================================================

@pytest.fixture
def two_teams(team_factory, app_factory, admin_factory, actor_for):
    """
    Two teams with one app each, plus the system app and one admin per role.

    Returns a dict with keys: system_app, app1, app2, team1, team2,
    site_admin, team_admin (team1), app_admin (app1 only), and the matching
    ``*_actor`` entries.
    """
    team1 = team_factory(name="Team One")
    team2 = team_factory(name="Team Two")
    system_app = app_factory(name="System", is_system=True)
    app1 = app_factory(name="Alpha", team=team1)
    app2 = app_factory(name="Beta", team=team2)

    site_admin = admin_factory(name="Sam Site", role="site_admin")
    team_admin = admin_factory(name="Tess Team", role="team_admin", team=team1)
    app_admin = admin_factory(name="Abe App", role="app_admin", apps=[app1])

    return {
        'system_app': system_app,
        'app1': app1,
        'app2': app2,
        'team1': team1,
        'team2': team2,
        'site_admin': site_admin,
        'team_admin': team_admin,
        'app_admin': app_admin,
        'site_admin_actor': actor_for(site_admin),
        'team_admin_actor': actor_for(team_admin),
        'app_admin_actor': actor_for(app_admin),
    }


@pytest.fixture
def base_time() -> datetime:
    """Fixed time that factory ``minutes`` offsets are relative to."""
    return BASE_TIME
