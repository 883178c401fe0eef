# Overview: Persistence gateway; owns the engine pool lifecycle, raw queries, and health checks.

"""
Persistence gateway.

The ORM session and the pooled engine behind it are created once per
process by Flask-SQLAlchemy when the app is built. This wrapper gives
them an explicit lifecycle:

- init_app(app): bind to the app, install pool listeners
- query(sql, params): parameterized raw SQL over a pooled connection
- test_connection() / test_orm_connection() / health_check(): readiness
- close(): release the session and dispose the pool on shutdown

All methods except init_app need an application context.
"""

from __future__ import annotations

import sqlite3
import time
from typing import Any

from flask import Flask, current_app
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError

from .time_utils import utcnow, to_utc_z


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES clauses unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Database:
    def __init__(self, db=None):
        self.db = db

    def init_app(self, app: Flask) -> None:
        app.extensions["stockroom.database"] = self
        with app.app_context():
            engine = self.db.engine
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        app.logger.info("Database gateway ready (%s)", engine.url.render_as_string(hide_password=True))

    @property
    def engine(self):
        return self.db.engine

    def query(self, sql: str, params: dict[str, Any] | None = None) -> list[dict]:
        """
        Execute a parameterized statement in its own transaction.

        Returns rows as dicts (empty list for statements without a result set).
        Errors are logged and re-raised to the caller.
        """
        start = time.perf_counter()
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(sql), params or {})
                rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
        except SQLAlchemyError:
            current_app.logger.error("Error executing query: %s", sql[:100], exc_info=True)
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        current_app.logger.debug(
            "Executed query: %s (%.2f ms, %d rows)", sql[:100], elapsed_ms, len(rows)
        )
        return rows

    def test_connection(self) -> bool:
        """Round-trip over a raw pooled connection."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            current_app.logger.exception("Database connection test failed")
            return False

    def test_orm_connection(self) -> bool:
        """Round-trip through the ORM session."""
        try:
            self.db.session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            current_app.logger.exception("ORM connection test failed")
            self.db.session.rollback()
            return False

    def health_check(self) -> dict:
        return {
            "connection": self.test_connection(),
            "orm": self.test_orm_connection(),
            "timestamp": to_utc_z(utcnow()),
        }

    def close(self) -> None:
        self.db.session.remove()
        self.engine.dispose()
        current_app.logger.info("All database connections closed")
