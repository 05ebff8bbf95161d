"""Data models for storage layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChatMessage:
    sender: str  # "user" | "ai"
    text: str
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sender": self.sender,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatMessage:
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        elif timestamp is None:
            timestamp = utcnow()
        sender = data.get("sender", "user")
        if sender not in ("user", "ai"):
            raise ValueError(f"Unknown message sender: {sender!r}")
        return cls(sender=sender, text=data.get("text", ""), timestamp=timestamp)


@dataclass
class ChatSession:
    session_id: str
    bot_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    messages: list[ChatMessage] = field(default_factory=list)
    user_ip: str = ""

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def duration(self) -> Optional[int]:
        """Whole seconds between start and end; None while either bound is unknown."""
        if self.start_time is None or self.end_time is None:
            return None
        return int((self.end_time - self.start_time).total_seconds())

    @property
    def first_user_message(self) -> Optional[str]:
        return next((m.text for m in self.messages if m.sender == "user"), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "botId": self.bot_id,
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "messages": [m.to_dict() for m in self.messages],
            "messageCount": self.message_count,
            "userIP": self.user_ip,
            "duration": self.duration,
        }


@dataclass
class SessionSummary:
    session_id: str
    start_time: datetime
    message_count: int
    first_user_message: Optional[str] = None


@dataclass
class AccessLogEntry:
    ip: str
    action: str
    user_agent: str = ""
    created_at: datetime = field(default_factory=utcnow)
    id: Optional[int] = None
