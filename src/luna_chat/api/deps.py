"""FastAPI dependencies: the running app, client address and the admin gate."""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from luna_chat.app import LunaApp
from luna_chat.config import is_placeholder


def get_luna(request: Request) -> LunaApp:
    luna = getattr(request.app.state, "luna", None)
    if luna is None:
        raise HTTPException(status_code=500, detail="Application not initialized")
    return luna


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def require_admin(
    x_admin_secret: Optional[str] = Header(default=None),
    luna: LunaApp = Depends(get_luna),
) -> None:
    expected = luna.config.server.admin_secret
    if is_placeholder(expected):
        raise HTTPException(status_code=503, detail="Admin access is not configured")
    if not x_admin_secret or not hmac.compare_digest(x_admin_secret.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Acesso não autorizado")
