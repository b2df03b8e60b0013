"""Shared FastAPI dependencies."""

from uuid import UUID

from fastapi import Header, HTTPException, status


async def get_owner_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Resolve the caller from the X-User-Id header set by the auth gateway."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user id"
        )
    try:
        return UUID(x_user_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user id"
        ) from exc
