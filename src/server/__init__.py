"""Websocket UI server streaming runtime events and accepting commands."""

from .config import ServerConfigurationError, UIServerConfig
from .events import ClientMessage
from .service import UIServer

__all__ = [
    "ClientMessage",
    "ServerConfigurationError",
    "UIServerConfig",
    "UIServer",
]
