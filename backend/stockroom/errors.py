# Overview: API error taxonomy and the single translation layer from store errors to HTTP errors.

"""
Error taxonomy shared by every blueprint.

Services raise ApiError subclasses; one Flask error handler renders them as
{"message": ..., **extra} with the matching status. Store exceptions are
classified once here (unique violation, foreign-key violation, missing row)
instead of in every route.
"""

from __future__ import annotations

import re

from flask import Flask, current_app, jsonify
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm.exc import StaleDataError
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"message": self.message}
        body.update(self.extra)
        return body


class ValidationError(ApiError):
    """400-level input problem; message names the offending field(s)."""
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class AuthorizationError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    """409-level uniqueness or referential-integrity conflict."""
    status_code = 409


class UnexpectedError(ApiError):
    status_code = 500


UNIQUE_VIOLATION = "unique"
FOREIGN_KEY_VIOLATION = "foreign_key"

# PostgreSQL SQLSTATE codes
_PG_UNIQUE = "23505"
_PG_FOREIGN_KEY = "23503"

_SQLITE_UNIQUE_RE = re.compile(r"UNIQUE constraint failed: (.+)$")
_PG_KEY_RE = re.compile(r"Key \(([^)]+)\)")


def classify_integrity_error(exc: IntegrityError) -> tuple[str | None, list[str]]:
    """
    Returns (kind, fields) for a store integrity error.

    kind is UNIQUE_VIOLATION, FOREIGN_KEY_VIOLATION or None (e.g. NOT NULL).
    fields are the bare column names involved when the driver reports them.
    """
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    message = str(orig) if orig is not None else str(exc)

    if code == _PG_UNIQUE or "UNIQUE constraint failed" in message or "duplicate key" in message:
        fields: list[str] = []
        match = _SQLITE_UNIQUE_RE.search(message.splitlines()[0])
        if match:
            fields = [part.strip().split(".")[-1] for part in match.group(1).split(",")]
        else:
            match = _PG_KEY_RE.search(message)
            if match:
                fields = [part.strip() for part in match.group(1).split(",")]
        return UNIQUE_VIOLATION, fields

    if code == _PG_FOREIGN_KEY or "FOREIGN KEY constraint failed" in message or "foreign key constraint" in message:
        return FOREIGN_KEY_VIOLATION, []

    return None, []


def _camel(field: str) -> str:
    head, *rest = field.split("_")
    return head + "".join(part.title() for part in rest)


def translate_db_error(
    exc: Exception,
    *,
    resource: str,
    action: str,
    unique_messages: dict[str, str] | None = None,
    unique_default: str | None = None,
    foreign_key_error: ApiError | None = None,
) -> ApiError:
    """
    Map a store exception to the API taxonomy.

    resource is the singular display name ("product"), action the verb used
    in the generic 500 message ("create" -> "Failed to create product").
    unique_messages maps a column name to a resource-specific 409 message.
    foreign_key_error replaces the default 409 for referential violations.

    Unrecognized errors are logged here with their traceback; the returned
    UnexpectedError carries only the generic message.
    """
    if isinstance(exc, ApiError):
        return exc

    if isinstance(exc, IntegrityError):
        kind, fields = classify_integrity_error(exc)
        if kind == UNIQUE_VIOLATION:
            for field in fields:
                if unique_messages and field in unique_messages:
                    return ConflictError(unique_messages[field], fields=[_camel(f) for f in fields])
            if unique_default:
                return ConflictError(unique_default, fields=[_camel(f) for f in fields])
            target = ", ".join(_camel(f) for f in fields) or "fields"
            return ConflictError(
                f"Failed to {action} {resource}: Unique constraint violation on {target}.",
                fields=[_camel(f) for f in fields],
            )
        if kind == FOREIGN_KEY_VIOLATION:
            if foreign_key_error is not None:
                return foreign_key_error
            return ConflictError(f"Cannot {action} {resource}: it has related records")

    if isinstance(exc, (StaleDataError, NoResultFound)):
        return NotFoundError(f"{resource.capitalize()} not found")

    current_app.logger.error("Failed to %s %s", action, resource, exc_info=exc)
    return UnexpectedError(f"Failed to {action} {resource}")


def register_error_handlers(app: Flask) -> None:
    from .extensions import db

    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        # Discard half-applied changes from a rejected request
        db.session.rollback()
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return jsonify({"message": err.description or err.name}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        current_app.logger.exception("Unhandled error")
        db.session.rollback()
        return jsonify({"message": "Internal server error"}), 500
