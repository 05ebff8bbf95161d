"""Admin routes gated by the X-Admin-Secret header."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from luna_chat.api.deps import get_luna, require_admin
from luna_chat.api.schemas import MessageResponse, SystemInstructionBody, UsageStatsOut
from luna_chat.app import LunaApp
from luna_chat.log import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])


@router.get("/system-instruction", response_model=SystemInstructionBody)
async def get_system_instruction(luna: LunaApp = Depends(get_luna)):
    return SystemInstructionBody(instruction=await luna.chat_handler.persona())


@router.put("/system-instruction", response_model=MessageResponse)
async def put_system_instruction(
    body: SystemInstructionBody,
    luna: LunaApp = Depends(get_luna),
):
    await luna.settings_repo.set_persona(body.instruction)
    logger.info("persona_updated", length=len(body.instruction))
    return MessageResponse(message="Instrução de sistema atualizada")


@router.get("/stats", response_model=UsageStatsOut)
async def usage_stats(luna: LunaApp = Depends(get_luna)):
    sessions, messages = await luna.session_repo.count_totals()
    connections = await luna.settings_repo.connection_stats()
    return UsageStatsOut(total_sessions=sessions, total_messages=messages, **connections)
