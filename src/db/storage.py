# src/db/storage.py
# key-value slots shared by every client that points at the same storage file
from __future__ import annotations

from typing import Optional

from db.database import connect

TOKEN_KEY = "user_token"
USER_ID_KEY = "user_id"
USER_TYPE_KEY = "user_type"

SESSION_KEYS = (TOKEN_KEY, USER_ID_KEY, USER_TYPE_KEY)


async def get_item(key: str) -> Optional[str]:
    """Return the stored value for key, or None when the slot is empty."""
    async with connect() as conn:
        cur = await conn.execute("SELECT value FROM storage WHERE key = ?;", (key,))
        row = await cur.fetchone()
        await cur.close()
    return row[0] if row else None


async def set_item(key: str, value: str) -> None:
    async with connect() as conn:
        await conn.execute(
            """
            INSERT INTO storage(key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value;
            """,
            (key, str(value)),
        )
        await conn.commit()


async def remove_items(*keys: str) -> None:
    if not keys:
        return
    placeholders = ", ".join("?" * len(keys))
    async with connect() as conn:
        await conn.execute(
            f"DELETE FROM storage WHERE key IN ({placeholders});", tuple(keys)
        )
        await conn.commit()

