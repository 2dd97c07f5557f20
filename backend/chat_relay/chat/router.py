"""Chat router providing HTTP and WebSocket endpoints.

This module provides:
    - POST /chat/login: Remember the posted user name and open a session
    - POST /chat/logout: Forget the identity cookie (the session is kept)
    - POST /chat/message: Post a message to the room
    - GET /chat/message: Fetch and mark read all unread messages
    - WebSocket /chat/ws/{username}: "new_message" push notifications

Request and response bodies are plain text.  After a "new_message" frame the
client is expected to call GET /chat/message.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from chat_relay.auth.identity import forget, remember, require_identity

from .binder import ConnectionBinder
from .coordinator import ChatCoordinator
from .exceptions import UnknownUserError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def get_coordinator(request: Request) -> ChatCoordinator:
    """Dependency returning the application's ChatCoordinator."""
    return request.app.state.coordinator


def _unknown_user(e: UnknownUserError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


async def _read_text(request: Request) -> str:
    """Decode the request body as UTF-8, or fail with 400."""
    try:
        return (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be UTF-8 text",
        )


@router.post("/login")
async def login(
    request: Request,
    coordinator: ChatCoordinator = Depends(get_coordinator),
) -> RedirectResponse:
    """Log in as the user named by the request body.

    Returns:
        303 redirect to the site root.
    """
    user_id = await _read_text(request)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User name must not be empty",
        )
    logger.info(f"[Chat] Login with infos: {user_id}")

    remember(request, user_id)
    coordinator.login(user_id)
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/logout")
async def logout(request: Request) -> RedirectResponse:
    """Forget the caller's identity.  Their unread count is kept."""
    forget(request)
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/message", response_class=PlainTextResponse)
async def post_message(
    request: Request,
    user_id: str = Depends(require_identity),
    coordinator: ChatCoordinator = Depends(get_coordinator),
) -> str:
    """Send the request body to everyone in the room."""
    body = await _read_text(request)
    try:
        coordinator.submit_message(user_id, body)
    except UnknownUserError as e:
        raise _unknown_user(e)
    return ""


@router.get("/message", response_class=PlainTextResponse)
async def get_messages(
    user_id: str = Depends(require_identity),
    coordinator: ChatCoordinator = Depends(get_coordinator),
) -> str:
    """Return the caller's unread messages, one per line, and mark them read."""
    try:
        return coordinator.fetch_unread(user_id)
    except UnknownUserError as e:
        raise _unknown_user(e)


@router.websocket("/ws/{username}")
async def websocket_endpoint(websocket: WebSocket, username: str) -> None:
    """Push a text frame to the client every time a message is posted."""
    binder: ConnectionBinder = websocket.app.state.binder
    await binder.handle(websocket, username)
