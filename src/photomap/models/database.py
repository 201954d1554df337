"""
Database initialization and management for the photomap media store.

This module provides functions to initialize the DuckDB index and manage
its connection.
"""

import logging
import threading
from pathlib import Path
from typing import Any

import duckdb

from .schema import REQUIRED_COLUMNS, get_schema_statements, validate_schema_compatibility

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Manages a DuckDB connection and schema for the media index.

    Queries are serialized with a lock so the resolver worker thread and
    the UI thread can share one manager.
    """

    def __init__(self, db_path: str):
        """
        Initialize DatabaseManager.

        Args:
            db_path: Path to the DuckDB database file
        """
        self.db_path = db_path
        self._connection: duckdb.DuckDBPyConnection | None = None
        self._lock = threading.RLock()

    def connect(self) -> duckdb.DuckDBPyConnection:
        """
        Get or create a database connection.

        Returns:
            DuckDB connection object
        """
        if self._connection is None:
            self._connection = duckdb.connect(self.db_path)
            logger.info(f"Connected to DuckDB database at {self.db_path}")

        return self._connection

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
                logger.info("Closed DuckDB database connection")

    def initialize_schema(self) -> None:
        """
        Create the media table, its id sequence and indexes if missing.

        Raises:
            RuntimeError: If schema validation fails
            duckdb.Error: If database operations fail
        """
        if not validate_schema_compatibility():
            raise RuntimeError("Schema is missing required media columns")

        with self._lock:
            conn = self.connect()
            try:
                for statement in get_schema_statements():
                    logger.debug(f"Executing SQL: {statement}")
                    conn.execute(statement)

                conn.commit()
                logger.info("Database schema initialized successfully")

            except duckdb.Error as e:
                logger.error(f"Failed to initialize database schema: {e}")
                raise

    def verify_schema(self) -> bool:
        """
        Verify that the media table exists with every required column.

        Returns:
            True if schema is valid, False otherwise
        """
        with self._lock:
            conn = self.connect()
            try:
                result = conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name='media'"
                ).fetchone()
                if not result:
                    logger.warning("Media table does not exist")
                    return False

                columns = conn.execute("PRAGMA table_info(media)").fetchall()
                column_names = {col[1] for col in columns}

                missing_columns = REQUIRED_COLUMNS - column_names
                if missing_columns:
                    logger.warning(f"Missing columns: {missing_columns}")
                    return False

                return True

            except duckdb.Error as e:
                logger.error(f"Schema verification failed: {e}")
                return False

    def execute_query(self, query: str, parameters: tuple | list | None = None) -> list[tuple]:
        """
        Execute a SQL query and return results.

        Raises:
            duckdb.Error: If query execution fails
        """
        with self._lock:
            conn = self.connect()
            try:
                if parameters:
                    result = conn.execute(query, parameters)
                else:
                    result = conn.execute(query)

                return result.fetchall()

            except duckdb.Error as e:
                logger.error(f"Query execution failed: {query}, error: {e}")
                raise

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def create_database(db_path: str) -> DatabaseManager:
    """
    Create and initialize a new media index.

    Raises:
        RuntimeError: If database creation fails
    """
    try:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        db_manager = DatabaseManager(db_path)
        db_manager.initialize_schema()

        if not db_manager.verify_schema():
            raise RuntimeError("Schema verification failed after creation")

        logger.info(f"Successfully created database at {db_path}")
        return db_manager

    except Exception as e:
        logger.error(f"Failed to create database at {db_path}: {e}")
        raise RuntimeError(f"Database creation failed: {e}") from e


def get_database_manager(db_path: str, create_if_missing: bool = True) -> DatabaseManager:
    """
    Get a DatabaseManager, optionally creating the database first.

    Raises:
        FileNotFoundError: If database doesn't exist and create_if_missing is False
        RuntimeError: If database operations fail
    """
    if not Path(db_path).exists():
        if create_if_missing:
            return create_database(db_path)
        raise FileNotFoundError(f"Database file not found: {db_path}")

    db_manager = DatabaseManager(db_path)

    if not db_manager.verify_schema():
        logger.warning("Schema verification failed, reinitializing...")
        db_manager.initialize_schema()

    return db_manager
