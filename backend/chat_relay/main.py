"""Chat Relay Backend Application.

This is the main entry point for the chat relay service: one shared chat
room where logged-in users post messages, fetch what they have not read yet,
and get a "new_message" push over a WebSocket whenever someone posts.

Modules:
    - chat: message log, sessions, notification channels and routes
    - auth: cookie-based identity helpers
    - counter: demo counter endpoints
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.middleware.sessions import SessionMiddleware

from chat_relay.auth.identity import get_identity
from chat_relay.chat.binder import ConnectionBinder
from chat_relay.chat.coordinator import ChatCoordinator
from chat_relay.chat.router import router as chat_router
from chat_relay.config import AppSettings, get_config
from chat_relay.counter.router import router as counter_router
from chat_relay.counter.service import CounterService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    config: AppSettings = app.state.settings

    # Apply configured log level to root logger so that
    # `logging.level: "debug"` in relay.settings.yaml activates DEBUG output.
    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    logger.info(
        f"Chat relay running on http://{config.server.host}:{config.server.port}"
    )

    yield  # Application runs here

    # Shutdown
    coordinator: ChatCoordinator = app.state.coordinator
    logger.info(
        "Application shutdown complete (%d messages, %d sessions)",
        coordinator.message_count,
        coordinator.session_count,
    )


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Build the FastAPI application and its shared chat state.

    Args:
        settings: Settings to use; loaded from the YAML files when omitted.

    Returns:
        A ready-to-serve FastAPI app.  ``app.state`` holds the settings,
        the ChatCoordinator, the ConnectionBinder and the CounterService.
    """
    if settings is None:
        settings = get_config()

    app = FastAPI(
        title="Chat Relay API",
        description="Single-room chat with unread tracking and WebSocket push",
        version="0.1.0",
        lifespan=lifespan,
    )

    coordinator = ChatCoordinator()
    app.state.settings = settings
    app.state.coordinator = coordinator
    app.state.binder = ConnectionBinder(
        coordinator,
        signal=settings.chat.notification_signal,
        queue_size=settings.chat.notification_queue_size,
    )
    app.state.counter = CounterService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secrets.session.secret_key,
        session_cookie=settings.session.cookie_name,
        max_age=settings.session.max_age,
        https_only=settings.session.https_only,
    )

    app.include_router(chat_router)
    app.include_router(counter_router)

    @app.get("/", response_class=PlainTextResponse)
    async def index(request: Request) -> str:
        """Greet the logged-in user, or "Anonymous"."""
        return f"Hello {get_identity(request) or 'Anonymous'}"

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint.

        Returns:
            dict: Status object indicating the server is running.
        """
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    config = get_config()
    uvicorn.run(
        "chat_relay.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        log_level=config.logging.level,
    )


if __name__ == "__main__":
    run()
