"""Request and response bodies for the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HistoryItem(BaseModel):
    sender: str
    text: str
    timestamp: Optional[str] = None


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    history: Optional[list[HistoryItem]] = None


class GenerateResponse(BaseModel):
    generatedText: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class SessionSummaryOut(BaseModel):
    sessionId: str
    startTime: datetime
    messageCount: int
    firstUserMessage: Optional[str] = None


class MessageOut(BaseModel):
    sender: str
    text: str
    timestamp: datetime


class SessionDetailOut(BaseModel):
    sessionId: str
    botId: Optional[str] = None
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None
    messages: list[MessageOut] = Field(default_factory=list)
    messageCount: int = 0
    userIP: Optional[str] = None
    duration: Optional[int] = None


class DateTimeOut(BaseModel):
    datetime: str
    timestamp: int


class LogConnectionRequest(BaseModel):
    action: str = Field(default="page_view", min_length=1, max_length=64)


class MessageResponse(BaseModel):
    message: str


class SystemInstructionBody(BaseModel):
    instruction: str = Field(min_length=1)


class UsageStatsOut(BaseModel):
    total_sessions: int
    total_messages: int
    total_connections: int
    unique_ips: int
    last_activity: Optional[str] = None
