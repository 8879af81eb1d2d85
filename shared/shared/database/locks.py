"""
Transaction-scoped advisory locks.

PostgreSQL only: ``pg_advisory_xact_lock`` blocks until the key is free and is
released automatically when the surrounding transaction commits or rolls back,
so callers never unlock by hand.  On any other dialect (SQLite in tests) the
lock is a no-op; SQLite already serializes writers.
"""
from __future__ import annotations

import hashlib

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


def advisory_lock_key(*, name: str) -> int:
    raw = f"trust:{name}".encode("utf-8")
    digest = hashlib.sha256(raw).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=True)


def _is_postgres(session: AsyncSession) -> bool:
    return session.get_bind().dialect.name == "postgresql"


async def acquire_xact_lock(session: AsyncSession, *, name: str) -> bool:
    """Take an advisory lock for the rest of the current transaction.

    Returns False when the backend has no advisory locks (nothing was taken).
    """
    if not _is_postgres(session):
        return False
    await session.execute(
        text("SELECT pg_advisory_xact_lock(:k)"),
        {"k": advisory_lock_key(name=name)},
    )
    return True
