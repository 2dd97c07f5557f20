"""Read and write the caller's identity in the signed session cookie."""
from typing import Optional

from fastapi import HTTPException, Request, status
from starlette.requests import HTTPConnection

IDENTITY_KEY = "identity"


def get_identity(conn: HTTPConnection) -> Optional[str]:
    """Return the remembered user name, or None for anonymous callers."""
    return conn.session.get(IDENTITY_KEY)


def remember(request: Request, user_id: str) -> None:
    request.session[IDENTITY_KEY] = user_id


def forget(request: Request) -> None:
    request.session.pop(IDENTITY_KEY, None)


def require_identity(request: Request) -> str:
    """FastAPI dependency: the caller's user name, or 401 if not logged in."""
    user_id = get_identity(request)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
        )
    return user_id
