"""Database connection, session lifecycle and first-run provisioning."""

from pathlib import Path
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from .schema import Admin, AdminRole, App, AppDenyList, Base, Delivery, DenyList, Email
from ..utils import Config, get_logger


logger = get_logger(__name__)

# Row counts reported by get_stats, keyed by stat name
STAT_MODELS = {
    'apps': App,
    'emails': Email,
    'deliveries': Delivery,
    'deny_lists': DenyList,
    'app_deny_lists': AppDenyList,
}


class Database:
    """
    SQLite store for deliveries, apps, admins and the deny lists.

    Query code never holds a session across requests; each request opens
    one with ``get_session`` and hands it to the query layer together with
    the request's Actor.

    Attributes:
        db_path: Path to SQLite database file
        engine: SQLAlchemy engine
        SessionLocal: Session factory

    Example:
        >>> db = Database.from_config(Config.load())
        >>> db.create_tables()
        >>> with db.get_session() as session:
        ...     page = QueryRoot(session, load_actor(session, 1)).emails()
    """

    def __init__(self, db_path: str = "data/deliverywatch.db"):
        """
        Open (and if needed create) the database file.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            connect_args={"check_same_thread": False, "timeout": 30}
        )

        # Scope subqueries rely on FK integrity between deliveries and apps
        @event.listens_for(self.engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        logger.info(f"Database opened: {self.db_path}")

    @classmethod
    def from_config(cls, config: Config, db_path: Optional[str] = None) -> 'Database':
        """Database at ``db_path``, falling back to ``config.DATABASE_PATH``."""
        return cls(db_path or config.DATABASE_PATH)

    def create_tables(self) -> None:
        """Create every delivery-monitoring table that is missing."""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info(f"Schema ready ({len(Base.metadata.tables)} tables)")
        except Exception as e:
            logger.error(f"Failed to create tables: {e}")
            raise

    def drop_tables(self) -> None:
        """
        Drop all tables from the database.

        WARNING: This deletes every delivery, log line and deny-list entry.
        """
        try:
            Base.metadata.drop_all(bind=self.engine)
            logger.warning("All database tables dropped")
        except Exception as e:
            logger.error(f"Failed to drop tables: {e}")
            raise

    @contextmanager
    def get_session(self) -> Session:
        """
        Session scoped to one request.

        Commits when the block exits normally; rolls back, logs and
        re-raises on error.

        Yields:
            SQLAlchemy session
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Session error: {e}")
            raise
        finally:
            session.close()

    def ensure_system_app(self, name: str) -> int:
        """
        Make sure the distinguished system app exists.

        Args:
            name: Name given to the app if it has to be created

        Returns:
            Id of the system app
        """
        with self.get_session() as session:
            app = session.query(App).filter(App.is_system.is_(True)).order_by(App.id).first()
            if app is not None:
                logger.info(f"System app already present: {app.name}")
                return app.id

            app = App(name=name, is_system=True)
            session.add(app)
            session.flush()
            logger.info(f"Created system app '{name}'")
            return app.id

    def provision_site_admin(self, email: str, name: str = "Site Admin") -> int:
        """
        Create a site admin unless an admin with that email already exists.

        Returns:
            Id of the new or existing admin
        """
        with self.get_session() as session:
            admin = session.query(Admin).filter(Admin.email == email).first()
            if admin is not None:
                logger.info(f"Admin {email} already exists ({admin.role})")
                return admin.id

            admin = Admin(name=name, email=email, role=AdminRole.SITE_ADMIN.value)
            session.add(admin)
            session.flush()
            logger.info(f"Provisioned site admin {email}")
            return admin.id

    def get_stats(self) -> dict[str, int]:
        """
        Row counts of the main tables.

        Example:
            >>> Database().get_stats()['deliveries']
            0
        """
        with self.get_session() as session:
            return {name: session.query(model).count() for name, model in STAT_MODELS.items()}

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Database(path={self.db_path})>"
