"""Date/time, access logging and health routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from luna_chat.ai.tools.datetime_tool import format_pt_br, now_in
from luna_chat.api.deps import client_ip, get_luna
from luna_chat.api.schemas import DateTimeOut, LogConnectionRequest, MessageResponse
from luna_chat.app import LunaApp
from luna_chat.log import get_logger
from luna_chat.storage.models import AccessLogEntry

logger = get_logger(__name__)

router = APIRouter()


@router.get("/api/datetime", response_model=DateTimeOut)
async def current_datetime(luna: LunaApp = Depends(get_luna)):
    now = now_in(luna.config.ai.timezone)
    return DateTimeOut(
        datetime=format_pt_br(now, seconds=False),
        timestamp=int(now.timestamp() * 1000),
    )


@router.post("/api/log-connection", response_model=MessageResponse, status_code=201)
async def log_connection(
    body: LogConnectionRequest,
    request: Request,
    luna: LunaApp = Depends(get_luna),
):
    ip = client_ip(request)
    await luna.settings_repo.log_connection(
        AccessLogEntry(
            ip=ip,
            action=body.action,
            user_agent=request.headers.get("user-agent", "")[:256],
        )
    )
    logger.info("connection_logged", ip=ip, action=body.action)
    return MessageResponse(message="Log registrado")


@router.get("/health")
async def health(luna: LunaApp = Depends(get_luna)):
    checks = await luna.health()
    healthy = checks.get("database", False)
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"status": "healthy" if healthy else "degraded", **checks},
    )
