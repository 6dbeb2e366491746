from uuid import UUID

from fastapi import HTTPException, Request


def get_optional_user_id(request: Request) -> UUID | None:
    """Read the caller's user id from the ``X-User-Id`` header.

    The header is set by the upstream authentication gateway; this service
    trusts it and only checks that it is a well-formed UUID.
    """
    raw = request.headers.get("X-User-Id")
    if not raw:
        return None
    try:
        return UUID(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-User-Id header") from None


def get_current_user_id(request: Request) -> UUID:
    """Like ``get_optional_user_id`` but rejects anonymous requests."""
    user_id = get_optional_user_id(request)
    if user_id is None:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return user_id
