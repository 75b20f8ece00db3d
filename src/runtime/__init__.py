"""Runtime engine exports."""

from .console import ConsoleRenderer
from .loop import RuntimeBootstrap, RuntimeEngine, RuntimeHooks

__all__ = ["ConsoleRenderer", "RuntimeBootstrap", "RuntimeEngine", "RuntimeHooks"]
