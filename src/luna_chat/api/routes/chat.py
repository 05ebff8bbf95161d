"""Chat API routes: generation and stored conversation history."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from luna_chat.api.deps import client_ip, get_luna
from luna_chat.api.schemas import (
    GenerateRequest,
    GenerateResponse,
    MessageOut,
    MessageResponse,
    SessionDetailOut,
    SessionSummaryOut,
)
from luna_chat.app import LunaApp
from luna_chat.log import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api")


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    body: GenerateRequest,
    request: Request,
    luna: LunaApp = Depends(get_luna),
):
    """Answer a prompt in the given session; errors are rendered by the LunaError handler."""
    text = await luna.chat_handler.generate(
        prompt=body.prompt,
        session_id=body.session_id,
        history=[item.model_dump() for item in body.history or []],
        user_ip=client_ip(request),
    )
    return GenerateResponse(generatedText=text)


@router.get("/chat/historicos", response_model=list[SessionSummaryOut])
async def list_histories(
    limit: int = Query(default=50, ge=1, le=500),
    luna: LunaApp = Depends(get_luna),
):
    sessions = await luna.session_repo.list_sessions(limit=limit)
    return [
        SessionSummaryOut(
            sessionId=s.session_id,
            startTime=s.start_time,
            messageCount=s.message_count,
            firstUserMessage=s.first_user_message,
        )
        for s in sessions
    ]


@router.get("/chat/historicos/{session_id}", response_model=SessionDetailOut)
async def get_history(session_id: str, luna: LunaApp = Depends(get_luna)):
    """Full session; an unknown id yields an empty placeholder rather than 404."""
    session = await luna.session_repo.get_session(session_id)
    if session is None:
        return SessionDetailOut(sessionId=session_id)
    return SessionDetailOut(
        sessionId=session.session_id,
        botId=session.bot_id,
        startTime=session.start_time,
        endTime=session.end_time,
        messages=[
            MessageOut(sender=m.sender, text=m.text, timestamp=m.timestamp)
            for m in session.messages
        ],
        messageCount=session.message_count,
        userIP=session.user_ip,
        duration=session.duration,
    )


@router.delete("/chat/historicos/{session_id}", response_model=MessageResponse)
async def delete_history(session_id: str, luna: LunaApp = Depends(get_luna)):
    deleted = await luna.session_repo.delete_session(session_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Histórico não encontrado")
    return MessageResponse(message="Histórico excluído com sucesso")
