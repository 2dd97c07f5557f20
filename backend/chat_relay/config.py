"""Chat relay application configuration.

Loads settings from two YAML files:
  * relay.settings.yaml  - non-secret configuration
  * relay.secrets.yaml   - secrets (never committed)

Both files are optional; missing files fall back to the model defaults.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("relay.settings.yaml")
SECRETS_FILE  = Path("relay.secrets.yaml")


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Secrets models
# ---------------------------------------------------------------------------


class SessionSecrets(BaseModel):
    secret_key: str = "change-me-in-production"


class Secrets(BaseModel):
    session: SessionSecrets = Field(default_factory=SessionSecrets)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host:            str  = "127.0.0.1"
    port:            int  = 8080
    reload:          bool = False
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])


class LoggingSettings(BaseModel):
    level: str = "info"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if not isinstance(logging.getLevelName(value.upper()), int):
            raise ValueError(f"Unknown log level: {value}")
        return value.lower()


class ChatSettings(BaseModel):
    """Message distribution settings."""
    # Text frame pushed to live connections when a message is posted
    notification_signal:     str  = "new_message"
    # Pending notifications per connection before new ones are dropped
    notification_queue_size: int  = Field(default=16, ge=1)


class SessionSettings(BaseModel):
    """Identity cookie settings."""
    cookie_name: str  = "chat-identity"
    max_age:     int  = 14 * 24 * 60 * 60
    https_only:  bool = False


class AppSettings(BaseModel):
    server:  ServerSettings  = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    chat:    ChatSettings    = Field(default_factory=ChatSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    secrets: Secrets         = Field(default_factory=Secrets)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_settings(
    settings_path: Optional[Path] = None,
    secrets_path: Optional[Path] = None,
) -> AppSettings:
    """Load and merge settings + secrets into a single *AppSettings* object."""
    settings_path = settings_path or SETTINGS_FILE
    secrets_path  = secrets_path or SECRETS_FILE
    settings_data = _load_yaml(settings_path)
    secrets_data  = _load_yaml(secrets_path)

    # Merge: secrets live under the "secrets" key in AppSettings
    settings_data["secrets"] = secrets_data

    app_settings = AppSettings(**settings_data)
    if app_settings.secrets.session.secret_key == SessionSecrets().secret_key:
        logger.warning("Using the default session secret; set session.secret_key in %s", secrets_path)
    logger.info(
        "Settings loaded (server=%s:%s, log_level=%s, queue_size=%s)",
        app_settings.server.host,
        app_settings.server.port,
        app_settings.logging.level,
        app_settings.chat.notification_queue_size,
    )
    return app_settings


_config: Optional[AppSettings] = None


def get_config() -> AppSettings:
    """Return the process-wide settings, loading them on first use."""
    global _config
    if _config is None:
        _config = load_settings()
    return _config


def reset_config() -> None:
    """Forget cached settings so the next get_config() reloads the files."""
    global _config
    _config = None
