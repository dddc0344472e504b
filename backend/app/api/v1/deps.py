# app/api/v1/deps.py
from fastapi import Header, Request
from app.core.errors import Unauthorized
from app.core.security import decode_access_token
from app.models.user import User

SESSION_COOKIE = "accessToken"


async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> User:
    """
    FastAPI dependency resolving the session owner.

    The session token is read from either:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (accessToken) - fallback method

    Returns:
        User: the active user the session is bound to

    Raises:
        Unauthorized (401): no token, bad/expired token, or the user no longer
            exists / is not verified

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            ...
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        token = request.cookies.get(SESSION_COOKIE)

    if not token:
        raise Unauthorized("Not authenticated")

    try:
        payload = decode_access_token(token)
        user_id: str = payload.get("sub")
    except Exception:
        raise Unauthorized("Session is invalid or has expired")

    user = await User.get_or_none(id=user_id, is_verified=True) if user_id else None
    if not user:
        raise Unauthorized("Not authenticated")
    return user
