"""Recognise database errors the ledger store degrades on instead of failing."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

# PostgreSQL undefined_table
_MISSING_TABLE_SQLSTATES = {"42P01"}


def is_missing_table_error(exc: SQLAlchemyError, table_name: str) -> bool:
    """Return ``True`` if ``exc`` says ``table_name`` does not exist.

    Checks the driver's SQLSTATE first (asyncpg) and falls back to the
    message text (SQLite reports ``no such table: <name>``).
    """

    orig = getattr(exc, "orig", None)
    if orig is None:
        return False

    if getattr(orig, "sqlstate", None) in _MISSING_TABLE_SQLSTATES:
        return True

    message = str(orig).lower()
    return table_name.lower() in message and (
        "no such table" in message or "does not exist" in message
    )
