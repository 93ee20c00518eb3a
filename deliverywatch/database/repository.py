"""Repository layer for address data access."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..utils import get_logger
from .schema import Address, normalize_address

logger = get_logger(__name__)


def address_ids_matching(text: str):
    """
    Subquery selecting the id of the Address with the given text.

    Lookup-only: when no such Address exists the subquery is empty, so a
    filter built on it matches nothing. Read paths use this instead of
    creating missing addresses.

    Args:
        text: Raw address text (normalized before matching)

    Returns:
        SQLAlchemy ``Select`` usable inside ``column.in_(...)``
    """
    return select(Address.id).where(Address.text == normalize_address(text))


class AddressRepository:
    """
    Repository for address lookups and creation.

    ``find`` is the read path. ``find_or_create`` belongs to write paths
    (bounce processing, email ingestion) and is never called while
    filtering.

    Attributes:
        session: SQLAlchemy session

    Example:
        >>> with db.get_session() as session:
        ...     repo = AddressRepository(session)
        ...     address = repo.find("Someone@Example.com")
    """

    def __init__(self, session: Session):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy session
        """
        self.session = session

    def find(self, text: str) -> Address | None:
        """
        Get an address by its text.

        Args:
            text: Address text, in any case and with surrounding whitespace

        Returns:
            Address if found, None otherwise

        Example:
            >>> address = repo.find("bounce@example.com")
        """
        return self.session.query(Address).filter(
            Address.text == normalize_address(text)
        ).first()

    def find_or_create(self, text: str) -> Address:
        """
        Get an address by its text, adding it to the session if missing.

        Args:
            text: Address text

        Returns:
            Existing or newly added Address
        """
        existing = self.find(text)
        if existing:
            return existing

        address = Address(text=normalize_address(text))
        self.session.add(address)
        self.session.flush()
        logger.debug(f"Created address: {address.text}")
        return address
