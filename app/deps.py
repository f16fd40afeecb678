"""Shared dependencies: acting user id, query service, rate limiting."""
from fastapi import Header, HTTPException, Request, status

from app.services import rate_limit
from app.services.query_service import QueryService


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Verified user id set by the upstream auth layer in X-User-Id. 401 if missing."""
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return x_user_id.strip()


def get_query_service(request: Request) -> QueryService:
    """The service is built once at startup and stored on app.state."""
    service = getattr(request.app.state, "query_service", None)
    if service is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not ready")
    return service


async def enforce_rate_limit(request: Request) -> None:
    """Per-caller budget; falls back to client IP when no user id is present."""
    actor = request.headers.get("x-user-id") or (request.client.host if request.client else "anonymous")
    try:
        await rate_limit.check("api", actor)
    except rate_limit.RateLimitExceeded as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e))
