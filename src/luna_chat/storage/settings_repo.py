"""Key-value settings and access-log storage used by the admin endpoints."""

from __future__ import annotations

from typing import Any, Optional

from luna_chat.log import get_logger
from luna_chat.storage.database import Database
from luna_chat.storage.models import AccessLogEntry, utcnow

logger = get_logger(__name__)

PERSONA_KEY = "system_instruction"


class SettingsRepository:
    def __init__(self, db: Database):
        self._db = db

    async def get(self, key: str) -> Optional[str]:
        cursor = await self._db.conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        )
        row = await cursor.fetchone()
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        await self._db.conn.execute(
            """INSERT INTO app_settings (key, value, updated_at) VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value,
                   updated_at = excluded.updated_at""",
            (key, value, utcnow().isoformat()),
        )
        await self._db.conn.commit()
        logger.info("setting_updated", key=key, length=len(value))

    async def get_persona(self) -> Optional[str]:
        """Admin-configured persona instruction, or None when never set."""
        return await self.get(PERSONA_KEY)

    async def set_persona(self, text: str) -> None:
        await self.set(PERSONA_KEY, text)

    async def log_connection(self, entry: AccessLogEntry) -> int:
        cursor = await self._db.conn.execute(
            "INSERT INTO access_logs (ip, action, user_agent, created_at) VALUES (?, ?, ?, ?)",
            (entry.ip, entry.action, entry.user_agent, entry.created_at.isoformat()),
        )
        await self._db.conn.commit()
        return cursor.lastrowid  # type: ignore[return-value]

    async def connection_stats(self) -> dict[str, Any]:
        cursor = await self._db.conn.execute(
            """SELECT COUNT(*) AS total,
                      COUNT(DISTINCT ip) AS unique_ips,
                      MAX(created_at) AS last_seen
               FROM access_logs"""
        )
        row = await cursor.fetchone()
        return {
            "total_connections": row["total"],
            "unique_ips": row["unique_ips"],
            "last_activity": row["last_seen"],
        }
