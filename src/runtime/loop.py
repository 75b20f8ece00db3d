"""Runtime orchestration loop for ticks, command lines, and UI requests."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from commands import (
    LINE_ERROR,
    LINE_SYSTEM,
    CommandInterpreter,
    OutputEvent,
    RateLimiter,
    complete_command,
    suggest_commands,
)
from contracts.command_contract import ASYNC_COMMANDS
from contracts.ui_protocol import (
    EVENT_ERROR,
    MESSAGE_COMMAND,
    MESSAGE_COMPLETE,
    STATE_BUSY,
    STATE_ERROR,
    STATE_IDLE,
    STATE_RUNNING,
    STATE_SIGNED_OUT,
)
from pomodoro import PomodoroTimer, SessionLedger, Settings, Stats
from pomodoro.constants import ACTION_SYNC, REASON_REMOTE, REASON_STARTUP
from server import ClientMessage, UIServer
from sync import StoreError, SyncController, sanitize_error

from .console import ConsoleRenderer
from .contracts import AppConfigLike
from .messages import timer_status_message
from .ticks import TickDependencies, TickProcessor
from .ui import RuntimeUIPublisher

TICK_INTERVAL_SECONDS = 1.0

_STOP = object()


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable input source; ``read_line`` blocks and returns None at EOF."""
    read_line: Callable[[], Optional[str]]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfigLike
    controller: SyncController
    ui_server: Optional[UIServer]
    console: Optional[ConsoleRenderer]
    hooks: RuntimeHooks
    tick_interval_seconds: float = TICK_INTERVAL_SECONDS


class RuntimeEngine:
    """Single event loop that serializes commands and drives the one-second tick."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._controller = bootstrap.controller
        self._console = bootstrap.console

        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._timer = PomodoroTimer(
            self._controller,
            ledger=SessionLedger(self._controller, logger=logging.getLogger("ledger")),
            logger=logging.getLogger("pomodoro"),
        )
        command_settings = bootstrap.app_config.commands
        self._interpreter = CommandInterpreter(
            self._timer,
            self._controller,
            rate_limiter=RateLimiter(
                command_settings.rate_limit_max,
                command_settings.rate_limit_window_seconds,
            ),
            confirm_reset_ttl_seconds=command_settings.confirm_reset_ttl_seconds,
            logout_delay_seconds=command_settings.logout_delay_seconds,
            reset_reload_delay_seconds=command_settings.reset_reload_delay_seconds,
            on_logout=self._handle_logout,
            emit=self._show_event,
            logger=logging.getLogger("commands"),
        )
        self._tick_processor = TickProcessor(
            TickDependencies(
                logger=self._logger,
                ui=self._ui,
                console=self._console,
                sound_enabled=lambda: self._controller.settings.sound_enabled,
                publish_idle_state=self._publish_idle_state,
                on_completed=self._settle_in_background,
            )
        )
        self._controller.add_listener(self._on_state_replaced)

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: Optional[asyncio.Queue[Any]] = None
        self._background: set[asyncio.Task] = set()
        self._exit_code = 0

    @property
    def timer(self) -> PomodoroTimer:
        return self._timer

    @property
    def interpreter(self) -> CommandInterpreter:
        return self._interpreter

    def submit_threadsafe(self, message: ClientMessage) -> None:
        """Queue a UI client message from another thread."""
        loop, queue = self._loop, self._queue
        if loop is None or queue is None:
            self._logger.debug("Dropping %s message: runtime not started", message.type)
            return
        loop.call_soon_threadsafe(queue.put_nowait, (message.type, message.text))

    async def run(self) -> int:
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()

        try:
            await self._controller.hydrate()
        except StoreError as error:
            self._logger.error("Failed to load user data: %s", error, exc_info=True)
            self._publish_error(f"Failed to load user data: {sanitize_error(error)}")
            await self._shutdown()
            return 1

        self._publish_startup_sync()
        self._greet()

        reader = threading.Thread(target=self._read_input, daemon=True, name="stdin-reader")
        reader.start()
        tick_task = asyncio.create_task(self._tick_loop())
        try:
            while True:
                item = await self._queue.get()
                if item is _STOP:
                    break
                kind, text = item
                if kind == MESSAGE_COMPLETE:
                    self._handle_completion_request(text)
                else:
                    await self._handle_command(text)
        except asyncio.CancelledError:
            self._logger.info("Runtime cancelled.")
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            self._exit_code = 1
        finally:
            tick_task.cancel()
            await asyncio.gather(tick_task, return_exceptions=True)
            await self._shutdown()
        return self._exit_code

    def request_stop(self) -> None:
        if self._queue is not None:
            self._queue.put_nowait(_STOP)

    async def _handle_command(self, text: str) -> None:
        if self._command_name(text) in ASYNC_COMMANDS:
            self._ui.publish_state(STATE_BUSY, message="Waiting for store")

        result = await self._interpreter.execute(text)
        self._show(result.events)
        self._publish_timer(ACTION_SYNC)
        self._publish_state_values()
        self._publish_idle_state()

    def _handle_completion_request(self, text: str) -> None:
        self._ui.publish_suggestions(
            text,
            completion=complete_command(text),
            suggestions=suggest_commands(text),
        )

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self._bootstrap.tick_interval_seconds
        next_at = loop.time() + interval
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            now = loop.time()
            # Catch up on ticks missed while the loop was busy.
            while next_at <= now:
                next_at += interval
                self._emit_tick()

    def _emit_tick(self) -> None:
        tick = self._timer.tick()
        if tick is not None:
            self._tick_processor.handle_tick(tick)

    def _read_input(self) -> None:
        read_line = self._bootstrap.hooks.read_line
        while True:
            try:
                line = read_line()
            except Exception as error:
                self._logger.error("Input reader failed: %s", error, exc_info=True)
                line = None
            if line is None:
                self._logger.info("Input closed; stopping.")
                self._post_threadsafe(_STOP)
                return
            if line.strip():
                self._post_threadsafe((MESSAGE_COMMAND, line))

    def _post_threadsafe(self, item: Any) -> None:
        loop, queue = self._loop, self._queue
        if loop is None or queue is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(queue.put_nowait, item)
        except RuntimeError:
            # Loop already closed.
            return

    def _settle_in_background(self) -> None:
        task = asyncio.ensure_future(self._settle())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _settle(self) -> None:
        await self._controller.drain()
        notices = self._controller.take_notices()
        if notices:
            self._show(
                [
                    OutputEvent(
                        LINE_ERROR if notice.level == "error" else LINE_SYSTEM,
                        notice.message,
                    )
                    for notice in notices
                ]
            )
        self._publish_state_values()

    def _on_state_replaced(self, settings: Settings, stats: Stats) -> None:
        del settings, stats
        if self._timer.resync():
            self._publish_timer(ACTION_SYNC, reason=REASON_REMOTE)

    def _handle_logout(self) -> None:
        self._ui.publish_state(STATE_SIGNED_OUT, message="Signed out")
        self.request_stop()

    def _greet(self) -> None:
        profile = self._controller.profile
        name = (profile.display_name or profile.uid) if profile is not None else "there"
        self._show(
            [
                OutputEvent(LINE_SYSTEM, f"Welcome, {name}."),
                OutputEvent(LINE_SYSTEM, "Type '/help' for available commands."),
            ]
        )

    def _show(self, events: Sequence[OutputEvent]) -> None:
        if not events:
            return
        self._ui.publish_output(events)
        if self._console is not None:
            self._console.render(events)

    def _show_event(self, event: OutputEvent) -> None:
        self._show((event,))
        self._publish_state_values()

    def _publish_startup_sync(self) -> None:
        self._publish_timer(ACTION_SYNC, reason=REASON_STARTUP)
        self._publish_state_values()
        self._publish_idle_state()

    def _publish_timer(self, action: str, *, reason: str = "") -> None:
        self._ui.publish_timer_update(
            self._timer.snapshot(),
            action=action,
            accepted=True,
            reason=reason,
        )

    def _publish_state_values(self) -> None:
        self._ui.publish_stats(self._controller.settings, self._controller.stats)
        self._ui.publish_sync(self._controller.sync_error)

    def _publish_idle_state(self) -> None:
        snapshot = self._timer.snapshot()
        self._ui.publish_state(
            STATE_RUNNING if snapshot.is_running else STATE_IDLE,
            message=timer_status_message(snapshot),
        )

    def _publish_error(self, message: str) -> None:
        self._ui.publish(EVENT_ERROR, state=STATE_ERROR, message=message)
        if self._console is not None:
            self._console.render([OutputEvent(LINE_ERROR, message)])

    @staticmethod
    def _command_name(text: str) -> str:
        token = text.strip().split(maxsplit=1)[0] if text.strip() else ""
        return token[1:].lower() if token.startswith("/") else ""

    async def _shutdown(self) -> None:
        for task in tuple(self._background):
            task.cancel()
        await asyncio.gather(*tuple(self._background), return_exceptions=True)
        await self._interpreter.wait_scheduled()
        await self._controller.drain()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
