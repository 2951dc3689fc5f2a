from fastapi import Request

from app.core.db import get_session

__all__ = ["client_ip", "get_session"]


def client_ip(request: Request) -> str | None:
    """Best-effort caller address for monitoring logs."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
