"""
Base Database Service Module

This module provides shared database utilities and connection management
for the specialized database services in the application.
"""

import logging
import os
import sqlite3
from datetime import datetime
from typing import Any

from .. import config
from .errors import StorageError

# Configure logger for this module
logger = logging.getLogger(__name__)


class BaseDatabaseService:
    """
    Base class providing shared database utilities and connection management.

    Each call opens a short-lived connection, so independent requests never
    share a cursor. Database failures are logged and re-raised as
    ``StorageError`` so callers can tell them apart from empty results.
    """

    def __init__(self, db_path: str | None = None):
        """
        Initialize the base database service.

        Args:
            db_path (str): Path to the SQLite database file. Defaults to
                          ``config.DB_PATH``. The directory will be created if
                          it doesn't exist.
        """
        self.db_path = db_path or config.DB_PATH
        self._ensure_data_dir()

    def _ensure_data_dir(self):
        """
        Ensure the data directory exists for the database file.
        """
        data_dir = os.path.dirname(self.db_path)
        if data_dir and not os.path.exists(data_dir):
            os.makedirs(data_dir)

    def get_connection(self) -> sqlite3.Connection:
        """
        Get a database connection.

        Returns:
            sqlite3.Connection: Database connection object
        """
        return sqlite3.connect(self.db_path)

    def execute_query(
        self,
        query: str,
        params: tuple = (),
        fetch_one: bool = False,
        fetch_all: bool = False,
    ) -> Any:
        """
        Execute a read query.

        Args:
            query (str): SQL query to execute
            params (tuple): Query parameters
            fetch_one (bool): Whether to fetch one result
            fetch_all (bool): Whether to fetch all results

        Returns:
            Any: A single ``sqlite3.Row``, a list of rows, or None

        Raises:
            StorageError: If the query fails
        """
        try:
            with self.get_connection() as conn:
                conn.row_factory = sqlite3.Row
                cursor = conn.execute(query, params)

                if fetch_one:
                    return cursor.fetchone()
                if fetch_all:
                    return cursor.fetchall()
                return None
        except sqlite3.Error as e:
            logger.error(f"Database query error: {e}")
            raise StorageError(str(e)) from e

    def execute_insert(self, query: str, params: tuple) -> int:
        """
        Execute an INSERT query and return the last row ID.

        ``sqlite3.IntegrityError`` propagates unchanged so callers can map
        constraint violations to their own conflict errors.

        Raises:
            sqlite3.IntegrityError: On a constraint violation
            StorageError: On any other database failure
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.execute(query, params)
                conn.commit()
                return cursor.lastrowid
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            logger.error(f"Database insert error: {e}")
            raise StorageError(str(e)) from e

    def execute_update_delete(self, query: str, params: tuple) -> bool:
        """
        Execute an UPDATE or DELETE query.

        Returns:
            bool: True if rows were affected, False otherwise

        Raises:
            StorageError: If the statement fails
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.execute(query, params)
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"Database update/delete error: {e}")
            raise StorageError(str(e)) from e

    def get_current_timestamp(self) -> str:
        """
        Get current timestamp for database operations.

        Returns:
            str: Current timestamp in SQLite format
        """
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")
