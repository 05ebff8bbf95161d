"""Chat session repository: one JSON document per session, upserted each turn."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

from luna_chat.log import get_logger
from luna_chat.storage.database import Database
from luna_chat.storage.models import ChatMessage, ChatSession, SessionSummary, utcnow

logger = get_logger(__name__)


class SessionRepository:
    """Load, append to, list and delete chat sessions.

    Writes are a plain read-modify-upsert keyed by session id. Two turns racing
    on the same id are not coordinated; whichever upsert lands last wins.
    """

    def __init__(self, db: Database):
        self._db = db

    async def get_session(self, session_id: str) -> Optional[ChatSession]:
        """Return the stored session, or None when the id is unknown."""
        cursor = await self._db.conn.execute(
            "SELECT * FROM chat_sessions WHERE session_id = ?",
            (session_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_session(row)

    async def append_messages(
        self,
        session_id: str,
        messages: list[ChatMessage],
        user_ip: str = "",
        bot_id: str = "",
    ) -> ChatSession:
        """Append messages to a session, creating it on first use, and return the result."""
        existing = await self.get_session(session_id)
        now = utcnow()

        if existing is None:
            session = ChatSession(
                session_id=session_id,
                bot_id=bot_id,
                start_time=messages[0].timestamp if messages else now,
                user_ip=user_ip,
            )
        else:
            session = existing
            if user_ip:
                session.user_ip = user_ip

        session.messages.extend(messages)
        session.end_time = messages[-1].timestamp if messages else now

        await self._db.conn.execute(
            """INSERT INTO chat_sessions
               (session_id, bot_id, start_time, end_time, messages_json,
                message_count, user_ip, duration, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(session_id) DO UPDATE SET
                   end_time = excluded.end_time,
                   messages_json = excluded.messages_json,
                   message_count = excluded.message_count,
                   user_ip = excluded.user_ip,
                   duration = excluded.duration,
                   updated_at = excluded.updated_at""",
            (
                session.session_id,
                session.bot_id,
                session.start_time.isoformat(),
                session.end_time.isoformat(),
                json.dumps([m.to_dict() for m in session.messages], ensure_ascii=False),
                session.message_count,
                session.user_ip,
                session.duration,
                now.isoformat(),
            ),
        )
        await self._db.conn.commit()
        logger.info(
            "session_saved",
            session_id=session_id,
            created=existing is None,
            message_count=session.message_count,
        )
        return session

    async def save_turn(
        self,
        session_id: str,
        user_message: ChatMessage,
        ai_message: ChatMessage,
        user_ip: str = "",
        bot_id: str = "",
    ) -> ChatSession:
        """Persist one user/ai exchange."""
        return await self.append_messages(
            session_id, [user_message, ai_message], user_ip=user_ip, bot_id=bot_id
        )

    async def list_sessions(self, limit: int = 50) -> list[SessionSummary]:
        """List sessions, most recently started first."""
        cursor = await self._db.conn.execute(
            """SELECT session_id, start_time, message_count, messages_json
               FROM chat_sessions
               ORDER BY start_time DESC
               LIMIT ?""",
            (limit,),
        )
        rows = await cursor.fetchall()
        summaries = []
        for row in rows:
            messages = json.loads(row["messages_json"])
            first_user = next(
                (m.get("text") for m in messages if m.get("sender") == "user"), None
            )
            summaries.append(
                SessionSummary(
                    session_id=row["session_id"],
                    start_time=datetime.fromisoformat(row["start_time"]),
                    message_count=row["message_count"],
                    first_user_message=first_user,
                )
            )
        return summaries

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session. Returns False if it did not exist."""
        cursor = await self._db.conn.execute(
            "DELETE FROM chat_sessions WHERE session_id = ?",
            (session_id,),
        )
        await self._db.conn.commit()
        deleted = cursor.rowcount > 0
        logger.info("session_deleted", session_id=session_id, found=deleted)
        return deleted

    async def count_totals(self) -> tuple[int, int]:
        """Return (session count, message count) across all sessions."""
        cursor = await self._db.conn.execute(
            "SELECT COUNT(*) AS sessions, COALESCE(SUM(message_count), 0) AS messages "
            "FROM chat_sessions"
        )
        row = await cursor.fetchone()
        return row["sessions"], row["messages"]

    @staticmethod
    def _row_to_session(row) -> ChatSession:
        return ChatSession(
            session_id=row["session_id"],
            bot_id=row["bot_id"],
            start_time=datetime.fromisoformat(row["start_time"]),
            end_time=datetime.fromisoformat(row["end_time"]) if row["end_time"] else None,
            messages=[ChatMessage.from_dict(m) for m in json.loads(row["messages_json"])],
            user_ip=row["user_ip"],
        )
