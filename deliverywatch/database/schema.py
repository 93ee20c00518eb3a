"""SQLAlchemy database schema for delivery monitoring."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class DeliveryStatus(str, Enum):
    """Lifecycle states of a single delivery attempt."""

    QUEUED = 'queued'
    SENT = 'sent'
    DELIVERED = 'delivered'
    BOUNCED = 'bounced'
    DEFERRED = 'deferred'
    REJECTED = 'rejected'
    HELD = 'held'  # withheld because the address is deny-listed


class AdminRole(str, Enum):
    """Stored role of an admin account."""

    SITE_ADMIN = 'site_admin'
    TEAM_ADMIN = 'team_admin'
    APP_ADMIN = 'app_admin'


def normalize_address(text: str) -> str:
    """Canonical form of an email address used for storage and lookups."""
    return text.strip().lower()


class Team(Base):
    """
    A named group that owns apps and has admin members.

    Attributes:
        id: Primary key
        name: Team name
        created_at: When the team was created
    """

    __tablename__ = 'teams'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    admins = relationship("Admin", back_populates="team")
    apps = relationship("App", back_populates="team")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Team(id={self.id}, name={self.name})>"


class Admin(Base):
    """
    An admin account that can sign in and query deliveries.

    Attributes:
        id: Primary key
        name: Display name
        email: Login email (unique)
        role: One of the AdminRole values
        team_id: Team the admin belongs to (None for unattached admins)
        created_at: When the account was provisioned
    """

    __tablename__ = 'admins'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    role = Column(String, nullable=False, default=AdminRole.TEAM_ADMIN.value)
    team_id = Column(Integer, ForeignKey('teams.id'), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    team = relationship("Team", back_populates="admins")
    app_memberships = relationship("AppMembership", back_populates="admin", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Admin(id={self.id}, email={self.email}, role={self.role})>"


class AppMembership(Base):
    """Direct membership of an admin in a single app."""

    __tablename__ = 'app_memberships'
    __table_args__ = (UniqueConstraint('admin_id', 'app_id'),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_id = Column(Integer, ForeignKey('admins.id'), nullable=False, index=True)
    app_id = Column(Integer, ForeignKey('apps.id'), nullable=False, index=True)

    admin = relationship("Admin", back_populates="app_memberships")
    app = relationship("App")


class App(Base):
    """
    A sending application.

    Exactly one app is flagged ``is_system``: the app used to send this
    tool's own email (invitations, password resets).

    Attributes:
        id: Primary key
        name: Display name
        team_id: Owning team
        is_system: Whether this is the distinguished system app
        open_tracking_enabled: Whether opens are tracked
        click_tracking_enabled: Whether link clicks are tracked
        custom_tracking_domain: Domain used in tracking links
        from_domain: Domain used for the envelope sender
        created_at: When the app was created
    """

    __tablename__ = 'apps'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    team_id = Column(Integer, ForeignKey('teams.id'), nullable=True, index=True)
    is_system = Column(Boolean, default=False, nullable=False, index=True)

    # Tracking configuration
    open_tracking_enabled = Column(Boolean, default=True, nullable=False)
    click_tracking_enabled = Column(Boolean, default=True, nullable=False)
    custom_tracking_domain = Column(String, nullable=True)
    from_domain = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    team = relationship("Team", back_populates="apps")
    emails = relationship("Email", back_populates="app")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<App(id={self.id}, name={self.name})>"


class Address(Base):
    """
    A normalized email address, stored once and referenced everywhere.

    Attributes:
        id: Primary key
        text: Normalized address text (unique)
    """

    __tablename__ = 'addresses'

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(String, nullable=False, unique=True, index=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Address({self.text})>"


class Email(Base):
    """
    An email submitted by an app, delivered to one or more recipients.

    Attributes:
        id: Primary key
        app_id: App that sent the email
        from_address_id: Sender address
        subject: Subject line
        created_at: When the email was accepted
    """

    __tablename__ = 'emails'

    id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(Integer, ForeignKey('apps.id'), nullable=False, index=True)
    from_address_id = Column(Integer, ForeignKey('addresses.id'), nullable=True, index=True)
    subject = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    app = relationship("App", back_populates="emails")
    from_address = relationship("Address")
    meta_values = relationship("MetaValue", back_populates="email", cascade="all, delete-orphan")
    deliveries = relationship("Delivery", back_populates="email", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Email(id={self.id}, app_id={self.app_id}, subject='{(self.subject or '')[:30]}')>"


class MetaValue(Base):
    """Key/value annotation supplied by the sending app for an email."""

    __tablename__ = 'meta_values'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email_id = Column(Integer, ForeignKey('emails.id'), nullable=False, index=True)
    key = Column(String, nullable=False, index=True)
    value = Column(Text)

    email = relationship("Email", back_populates="meta_values")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<MetaValue({self.key}={self.value})>"


class Delivery(Base):
    """
    One outbound send attempt of an email to one recipient address.

    ``app_id`` is a denormalized copy of ``email.app_id``.

    Attributes:
        id: Primary key
        email_id: Email being delivered
        app_id: App that sent the email
        address_id: Recipient address
        status: One of the DeliveryStatus values
        open_tracked: Whether opens are tracked for this delivery
        click_tracked: Whether clicks are tracked for this delivery
        created_at: When the attempt was created
    """

    __tablename__ = 'deliveries'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email_id = Column(Integer, ForeignKey('emails.id'), nullable=False, index=True)
    app_id = Column(Integer, ForeignKey('apps.id'), nullable=False, index=True)
    address_id = Column(Integer, ForeignKey('addresses.id'), nullable=False, index=True)
    status = Column(String, nullable=False, default=DeliveryStatus.QUEUED.value, index=True)
    open_tracked = Column(Boolean, default=False)
    click_tracked = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    email = relationship("Email", back_populates="deliveries")
    app = relationship("App")
    address = relationship("Address")
    postfix_log_lines = relationship(
        "PostfixLogLine",
        back_populates="delivery",
        cascade="all, delete-orphan",
        order_by="PostfixLogLine.time"
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Delivery(id={self.id}, app_id={self.app_id}, status={self.status})>"


class PostfixLogLine(Base):
    """
    A parsed postfix log line describing what happened to a delivery.

    Attributes:
        id: Primary key
        delivery_id: Delivery the line refers to
        time: Timestamp of the log line
        relay: Relay host that handled the message
        delay: Total delay in seconds
        delays: Postfix delay breakdown (a/b/c/d)
        dsn: Delivery status notification code (e.g. 2.0.0, 5.1.1)
        extended_status: Free-form status text from the remote server
    """

    __tablename__ = 'postfix_log_lines'

    id = Column(Integer, primary_key=True, autoincrement=True)
    delivery_id = Column(Integer, ForeignKey('deliveries.id'), nullable=False, index=True)
    time = Column(DateTime, nullable=False)
    relay = Column(String)
    delay = Column(Float)
    delays = Column(String)
    dsn = Column(String)
    extended_status = Column(Text)

    delivery = relationship("Delivery", back_populates="postfix_log_lines")

    @property
    def is_hard_bounce(self) -> bool:
        """Whether the DSN is a permanent (5.x.x) failure."""
        return bool(self.dsn) and self.dsn.startswith('5')

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<PostfixLogLine(delivery_id={self.delivery_id}, dsn={self.dsn})>"


class DenyList(Base):
    """
    Global deny-list entry: sends to this address are withheld for every app.

    Attributes:
        id: Primary key
        address_id: Blocked address
        caused_by_delivery_id: Delivery whose bounce created the entry
        bounce_count: Number of bounces that triggered the block
        created_at: When the entry was created
    """

    __tablename__ = 'deny_lists'

    id = Column(Integer, primary_key=True, autoincrement=True)
    address_id = Column(Integer, ForeignKey('addresses.id'), nullable=False, index=True)
    caused_by_delivery_id = Column(Integer, ForeignKey('deliveries.id'), nullable=True)
    bounce_count = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    address = relationship("Address")
    caused_by_delivery = relationship("Delivery")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<DenyList(address_id={self.address_id})>"


class AppDenyList(Base):
    """
    Per-app deny-list entry: sends from this app to the address are withheld.

    Attributes:
        id: Primary key
        app_id: App the block applies to
        address_id: Blocked address
        caused_by_delivery_id: Delivery whose bounce created the entry
        bounce_count: Number of bounces that triggered the block
        created_at: When the entry was created
    """

    __tablename__ = 'app_deny_lists'

    id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(Integer, ForeignKey('apps.id'), nullable=False, index=True)
    address_id = Column(Integer, ForeignKey('addresses.id'), nullable=False, index=True)
    caused_by_delivery_id = Column(Integer, ForeignKey('deliveries.id'), nullable=True)
    bounce_count = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    app = relationship("App")
    address = relationship("Address")
    caused_by_delivery = relationship("Delivery")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<AppDenyList(app_id={self.app_id}, address_id={self.address_id})>"
