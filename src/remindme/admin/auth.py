from __future__ import annotations

import hmac
from typing import Awaitable, Callable

from fastapi import HTTPException, Request

from remindme.logger import logger

AuthDependency = Callable[[Request], Awaitable[dict[str, str]]]


def extract_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip()
    token_header = request.headers.get("X-Remindme-Token", "").strip()
    return token_header or None


def make_admin_auth(admin_token: str) -> AuthDependency:
    if not admin_token:
        logger.warning("ADMIN_AUTH_TOKEN is not set; the admin API will refuse every request")

    async def require_admin_auth(request: Request) -> dict[str, str]:
        if not admin_token:
            raise HTTPException(status_code=503, detail="ADMIN_AUTH_TOKEN is not configured")

        token = extract_token(request)
        if token and hmac.compare_digest(token, admin_token):
            return {"auth": "token", "user": "admin-token"}

        raise HTTPException(status_code=401, detail="Unauthorized")

    return require_admin_auth


__all__ = ["extract_token", "make_admin_auth"]
