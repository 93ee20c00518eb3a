"""Configuration management using environment variables."""

import os
from pathlib import Path
from typing import Any, Optional
from dotenv import load_dotenv


class Config:
    """
    Application configuration loaded from environment variables.

    Environment variables can be set in a .env file in the project root.

    Attributes:
        DATABASE_PATH: Path to the SQLite database file
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_DIR: Directory for log files
        DATA_DIR: Directory for data storage
        DEFAULT_PAGE_SIZE: Page size used when a caller gives no limit
        MAX_PAGE_SIZE: Upper bound on any requested limit
        DELIVERIES_PER_PAGE: Page size of the delivery listing view
        SYSTEM_APP_NAME: Name of the app used to send our own email

    Example:
        >>> config = Config.load()
        >>> print(config.DATABASE_PATH)
        data/deliverywatch.db
    """

    DATABASE_PATH: str
    LOG_LEVEL: str
    LOG_DIR: str
    DATA_DIR: str
    DEFAULT_PAGE_SIZE: int
    MAX_PAGE_SIZE: int
    DELIVERIES_PER_PAGE: int
    SYSTEM_APP_NAME: str

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.DATABASE_PATH = os.getenv(
            'DATABASE_PATH',
            'data/deliverywatch.db'
        )
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.LOG_DIR = os.getenv('LOG_DIR', 'logs')
        self.DATA_DIR = os.getenv('DATA_DIR', 'data')
        self.DEFAULT_PAGE_SIZE = int(os.getenv('DEFAULT_PAGE_SIZE', '10'))
        self.MAX_PAGE_SIZE = int(os.getenv('MAX_PAGE_SIZE', '200'))
        self.DELIVERIES_PER_PAGE = int(os.getenv('DELIVERIES_PER_PAGE', '25'))
        self.SYSTEM_APP_NAME = os.getenv('SYSTEM_APP_NAME', 'Delivery Watch')

    @classmethod
    def load(cls, env_file: Optional[str] = None) -> 'Config':
        """
        Load configuration from .env file and environment variables.

        Args:
            env_file: Path to .env file (defaults to .env in project root)

        Returns:
            Config instance

        Example:
            >>> config = Config.load()
            >>> config.validate()
        """
        if env_file:
            load_dotenv(env_file)
        else:
            # Try to find .env in current directory or parent directories
            load_dotenv()

        config = cls()
        return config

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If a log level or page size is invalid

        Example:
            >>> config = Config.load()
            >>> config.validate()
        """
        # Check log level is valid
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.LOG_LEVEL not in valid_levels:
            raise ValueError(
                f"Invalid LOG_LEVEL: {self.LOG_LEVEL}. "
                f"Must be one of {valid_levels}"
            )

        for name in ('DEFAULT_PAGE_SIZE', 'MAX_PAGE_SIZE', 'DELIVERIES_PER_PAGE'):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be a positive integer")

        if self.DEFAULT_PAGE_SIZE > self.MAX_PAGE_SIZE:
            raise ValueError("DEFAULT_PAGE_SIZE cannot exceed MAX_PAGE_SIZE")

        # Create directories if they don't exist
        Path(self.LOG_DIR).mkdir(parents=True, exist_ok=True)
        Path(self.DATA_DIR).mkdir(parents=True, exist_ok=True)
        Path(self.DATABASE_PATH).parent.mkdir(parents=True, exist_ok=True)

    def public_settings(self) -> dict[str, Any]:
        """
        Settings that any authenticated admin may read.

        Returns:
            Dictionary of non-sensitive configuration values
        """
        return {
            'default_page_size': self.DEFAULT_PAGE_SIZE,
            'max_page_size': self.MAX_PAGE_SIZE,
            'deliveries_per_page': self.DELIVERIES_PER_PAGE,
            'system_app_name': self.SYSTEM_APP_NAME,
        }

    def __repr__(self) -> str:
        """Return string representation of config."""
        return (
            f"Config("
            f"DATABASE_PATH={self.DATABASE_PATH}, "
            f"LOG_LEVEL={self.LOG_LEVEL}, "
            f"LOG_DIR={self.LOG_DIR}, "
            f"DATA_DIR={self.DATA_DIR}"
            ")"
        )
