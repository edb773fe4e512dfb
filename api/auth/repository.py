"""
Auth persistence helpers.
"""

from __future__ import annotations

from core import db

from .security import normalize_email


async def create_user(*, email: str, password_hash: str) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO users (email, password_hash)
        VALUES ($1, $2)
        RETURNING id, email, created_at, updated_at
        """,
        normalize_email(email),
        password_hash,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, password_hash, created_at, updated_at
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def update_password_hash(*, user_id: int, password_hash: str) -> bool:
    row = await db.fetch_one(
        """
        UPDATE users
        SET password_hash = $2,
            updated_at = now()
        WHERE id = $1
        RETURNING id
        """,
        user_id,
        password_hash,
    )
    return row is not None
