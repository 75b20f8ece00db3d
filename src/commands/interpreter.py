"""Slash-command interpreter: validate, dispatch, and report."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Awaitable, Callable, Optional, Union

from contracts.command_contract import (
    CMD_CLEAR,
    CMD_COMMIT,
    CMD_COMPLETE,
    CMD_CONFIRM_RESET,
    CMD_HELP,
    CMD_LOGOUT,
    CMD_PAUSE,
    CMD_PLAY,
    CMD_RESET,
    CMD_RESET_DATA,
    CMD_SESSION,
    CMD_SET,
    CMD_SOUND,
    CMD_STATS,
    CMD_SYNC,
    CMD_THEME,
    SET_TARGET_BREAK,
    SET_TARGET_WORK,
    SOUND_ON,
)
from pomodoro import PomodoroTimer
from pomodoro.constants import PHASE_BREAK, PHASE_WORK
from sync import StoreError, SyncController, sanitize_error

from .messages import (
    RESET_DATA_WARNINGS,
    commit_text,
    complete_text,
    help_lines,
    rejection_text,
    reset_text,
    session_text,
    set_duration_text,
    sound_text,
    start_text,
    stats_lines,
    theme_text,
)
from .types import (
    LINE_CLEAR,
    LINE_ERROR,
    LINE_HELP,
    LINE_INPUT,
    LINE_OUTPUT,
    LINE_SYSTEM,
    CommandResult,
    OutputEvent,
    ParsedCommand,
)
from .validation import (
    RateLimiter,
    parse_command,
    parse_minutes,
    sanitize_string,
    strip_control_chars,
    strip_quotes,
    validate_command,
    validate_commit_message,
    validate_session_name,
    validate_set_command,
    validate_sound,
    validate_theme,
)

HandlerResult = Union[CommandResult, Awaitable[CommandResult]]
Handler = Callable[[ParsedCommand], HandlerResult]
EventSink = Callable[[OutputEvent], None]

RATE_LIMIT_MESSAGE = "Too many commands. Please wait a moment and try again."
NOT_SIGNED_IN_MESSAGE = "[ERROR] User not authenticated. Cannot reach the store."

_SET_TARGET_ARGUMENTS = {
    SET_TARGET_WORK: "work",
    SET_TARGET_BREAK: "short_break",
}


def _output(text: str) -> OutputEvent:
    return OutputEvent(LINE_OUTPUT, text)


def _system(text: str) -> OutputEvent:
    return OutputEvent(LINE_SYSTEM, text)


def _error(text: str) -> OutputEvent:
    return OutputEvent(LINE_ERROR, text)


def _failure(error: str) -> CommandResult:
    return CommandResult.fail(error, _error(error))


class CommandInterpreter:
    """Runs one command line at a time against the timer and sync controller.

    Every call to ``execute`` returns after local state has changed and all
    persistence it started has settled. Logout and the post-reset
    reinitialisation run later, after their configured delays; their output
    goes to ``emit``.
    """

    def __init__(
        self,
        timer: PomodoroTimer,
        controller: SyncController,
        *,
        rate_limiter: Optional[RateLimiter] = None,
        rate_limit_key: str = "local",
        confirm_reset_ttl_seconds: float = 30.0,
        logout_delay_seconds: float = 0.5,
        reset_reload_delay_seconds: float = 3.0,
        on_logout: Optional[Callable[[], None]] = None,
        emit: Optional[EventSink] = None,
        monotonic_fn: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._timer = timer
        self._controller = controller
        self._rate_limiter = rate_limiter or RateLimiter()
        self._rate_limit_key = rate_limit_key
        self._confirm_reset_ttl_seconds = confirm_reset_ttl_seconds
        self._logout_delay_seconds = logout_delay_seconds
        self._reset_reload_delay_seconds = reset_reload_delay_seconds
        self._on_logout = on_logout
        self._emit = emit
        self._monotonic = monotonic_fn or time.monotonic
        self._logger = logger or logging.getLogger("commands")

        self._reset_token_expires_at: Optional[float] = None
        self._scheduled: set[asyncio.Task] = set()
        self._handlers: dict[str, Handler] = {
            CMD_PLAY: self._handle_play,
            CMD_PAUSE: self._handle_pause,
            CMD_RESET: self._handle_reset,
            CMD_COMPLETE: self._handle_complete,
            CMD_COMMIT: self._handle_commit,
            CMD_SET: self._handle_set,
            CMD_SESSION: self._handle_session,
            CMD_THEME: self._handle_theme,
            CMD_SOUND: self._handle_sound,
            CMD_STATS: self._handle_stats,
            CMD_SYNC: self._handle_sync,
            CMD_HELP: self._handle_help,
            CMD_CLEAR: self._handle_clear,
            CMD_LOGOUT: self._handle_logout,
            CMD_RESET_DATA: self._handle_reset_data,
            CMD_CONFIRM_RESET: self._handle_confirm_reset,
        }

    @property
    def reset_pending(self) -> bool:
        expires_at = self._reset_token_expires_at
        return expires_at is not None and self._monotonic() < expires_at

    async def execute(self, line: str) -> CommandResult:
        echo = OutputEvent(LINE_INPUT, strip_control_chars(line).strip())
        result = await self._execute(line)
        await self._controller.drain()
        notices = tuple(
            _error(notice.message) if notice.level == "error" else _system(notice.message)
            for notice in self._controller.take_notices()
        )
        return result.with_events(before=(echo,), after=notices)

    async def wait_scheduled(self) -> None:
        """Wait for delayed logout or reinitialisation work to finish."""
        while self._scheduled:
            await asyncio.gather(*tuple(self._scheduled), return_exceptions=True)

    async def _execute(self, line: str) -> CommandResult:
        self._cancel_pending_reset(line)
        if not self._rate_limiter.is_allowed(self._rate_limit_key):
            self._logger.warning("Command rate limit exceeded")
            return _failure(RATE_LIMIT_MESSAGE)

        validation = validate_command(line)
        if not validation.is_valid:
            self._logger.debug("Rejected command line: %s", validation.error)
            return _failure(validation.error or "Invalid command")

        parsed = parse_command(line)

        handler = self._handlers.get(parsed.name)
        if handler is None:
            return _failure(
                f"Unknown command: {parsed.token}. Type '/help' for available commands."
            )

        self._logger.debug("Executing /%s", parsed.name)
        try:
            result = handler(parsed)
            if inspect.isawaitable(result):
                result = await result
        except Exception as error:
            self._logger.error("Command /%s failed: %s", parsed.name, error, exc_info=True)
            return _failure(f"Error executing command: {sanitize_error(error)}")
        return result

    def _cancel_pending_reset(self, line: str) -> None:
        """Any input other than /confirm-reset, even a rejected line, drops the token."""
        if self._reset_token_expires_at is None:
            return
        first, _, _ = strip_control_chars(line).strip().partition(" ")
        if first.lower() == "/" + CMD_CONFIRM_RESET:
            return
        self._reset_token_expires_at = None
        self._logger.info("Pending data reset cancelled by %r", first[:32])

    def _handle_play(self, _parsed: ParsedCommand) -> CommandResult:
        result = self._timer.start()
        if not result.accepted:
            text = rejection_text(result.reason)
            return CommandResult.rejected(text, _system(text))
        text = start_text(result)
        return CommandResult.ok(text, _output(text))

    def _handle_pause(self, _parsed: ParsedCommand) -> CommandResult:
        result = self._timer.pause()
        if not result.accepted:
            text = rejection_text(result.reason)
            return CommandResult.rejected(text, _system(text))
        return CommandResult.ok("Timer paused", _output("[PAUSED] Timer paused."))

    def _handle_reset(self, _parsed: ParsedCommand) -> CommandResult:
        text = reset_text(self._timer.reset())
        return CommandResult.ok(text, _output(text))

    def _handle_complete(self, _parsed: ParsedCommand) -> CommandResult:
        result = self._timer.complete()
        if not result.accepted or result.record is None:
            text = rejection_text(result.reason)
            return CommandResult.fail(text, _error(text))
        completed_phase = PHASE_BREAK if result.record.is_break else PHASE_WORK
        text = complete_text(completed_phase)
        return CommandResult.ok(text, _output(text))

    def _handle_commit(self, parsed: ParsedCommand) -> CommandResult:
        raw_message = strip_quotes(parsed.arg_string)
        validation = validate_commit_message(raw_message)
        if not validation.is_valid:
            return _failure(validation.error or "Invalid commit message.")
        message = sanitize_string(raw_message)
        self._timer.commit(message)
        return CommandResult.ok("Commit logged", _output(commit_text(message)))

    def _handle_set(self, parsed: ParsedCommand) -> CommandResult:
        validation = validate_set_command(parsed.args)
        if not validation.is_valid:
            return _failure(validation.error or "Invalid duration.")
        target = parsed.args[0].lower()
        minutes = parse_minutes(parsed.args[1])
        argument = _SET_TARGET_ARGUMENTS.get(target, "long_break")
        self._timer.set_durations(**{argument: minutes})
        text = set_duration_text(target, minutes)
        return CommandResult.ok(text, _output(text))

    def _handle_session(self, parsed: ParsedCommand) -> CommandResult:
        raw_name = strip_quotes(parsed.arg_string)
        validation = validate_session_name(raw_name)
        if not validation.is_valid:
            return _failure(validation.error or "Invalid session name.")
        name = sanitize_string(raw_name)
        clock_reset = not self._timer.state.is_running
        self._timer.set_session_name(name)
        return CommandResult.ok(
            "Session name updated",
            _output(session_text(name, clock_reset=clock_reset)),
        )

    def _handle_theme(self, parsed: ParsedCommand) -> CommandResult:
        theme = parsed.args[0].lower() if parsed.args else None
        if theme is not None:
            validation = validate_theme(theme)
            if not validation.is_valid:
                return _failure(validation.error or "Invalid theme.")
        self._timer.set_theme(theme)
        text = theme_text(self._controller.settings.theme)
        return CommandResult.ok(text, _output(text))

    def _handle_sound(self, parsed: ParsedCommand) -> CommandResult:
        option = parsed.args[0].lower() if parsed.args else None
        if option is not None:
            validation = validate_sound(option)
            if not validation.is_valid:
                return _failure(validation.error or "Invalid sound option.")
        self._timer.set_sound(None if option is None else option == SOUND_ON)
        text = sound_text(self._controller.settings.sound_enabled)
        return CommandResult.ok(text, _output(text))

    async def _handle_stats(self, _parsed: ParsedCommand) -> CommandResult:
        if self._controller.profile is not None:
            await self._controller.refresh()
        lines = stats_lines(
            self._controller.profile,
            self._controller.settings,
            self._controller.stats,
        )
        header, *body = lines
        return CommandResult.ok(
            "Stats displayed",
            _system(header),
            *(_output(line) for line in body),
        )

    async def _handle_sync(self, _parsed: ParsedCommand) -> CommandResult:
        if self._controller.profile is None:
            return _failure(NOT_SIGNED_IN_MESSAGE)
        if not await self._controller.refresh():
            return _failure("[ERROR] Sync failed. Local state was left unchanged.")
        text = "[SYNC] Settings and statistics reloaded from the store."
        return CommandResult.ok(text, _output(text))

    def _handle_help(self, _parsed: ParsedCommand) -> CommandResult:
        return CommandResult.ok(
            "Help displayed",
            *(OutputEvent(LINE_HELP, line) for line in help_lines()),
        )

    def _handle_clear(self, _parsed: ParsedCommand) -> CommandResult:
        return CommandResult.ok("Clear command", OutputEvent(LINE_CLEAR))

    def _handle_logout(self, _parsed: ParsedCommand) -> CommandResult:
        self._schedule(self._logout_delay_seconds, self._logout, "logout")
        return CommandResult.ok("Logging out...", _system("[LOGOUT] Signing out..."))

    def _handle_reset_data(self, _parsed: ParsedCommand) -> CommandResult:
        if self._controller.profile is None:
            return _failure(NOT_SIGNED_IN_MESSAGE)
        self._reset_token_expires_at = self._monotonic() + self._confirm_reset_ttl_seconds
        self._logger.info(
            "Data reset requested; awaiting confirmation for %ss",
            self._confirm_reset_ttl_seconds,
        )
        return CommandResult.ok(
            "Reset confirmation required",
            *(_system(line) for line in RESET_DATA_WARNINGS),
        )

    async def _handle_confirm_reset(self, _parsed: ParsedCommand) -> CommandResult:
        if not self.reset_pending:
            self._reset_token_expires_at = None
            return _failure(
                "[ERROR] No pending data reset. Type '/reset-data' first."
            )
        self._reset_token_expires_at = None
        if self._controller.profile is None:
            return _failure(NOT_SIGNED_IN_MESSAGE)

        deleting = _system("[RESET] Deleting all user data from the store...")
        try:
            await self._controller.delete_remote_data()
        except StoreError as error:
            self._logger.error("Data reset failed: %s", error)
            text = f"[ERROR] Failed to reset data: {sanitize_error(error)}"
            return CommandResult.fail(text, deleting, _error(text))

        self._timer.discard()
        self._schedule(self._reset_reload_delay_seconds, self._reinitialize, "reinitialize")
        return CommandResult.ok(
            "Data reset completed",
            deleting,
            _output("[SUCCESS] All data has been reset successfully!"),
            _system(
                "[INFO] Workspace will reinitialize in "
                f"{self._reset_reload_delay_seconds:g} seconds."
            ),
        )

    async def _logout(self) -> None:
        await self._controller.drain()
        self._controller.logout()
        self._timer.discard()
        self._logger.info("Signed out")
        if self._on_logout is not None:
            self._on_logout()

    async def _reinitialize(self) -> None:
        await self._controller.reinitialize()
        self._timer.discard()
        self._publish(_system("[INFO] Workspace reinitialized with default settings."))

    def _schedule(
        self,
        delay_seconds: float,
        action: Callable[[], Awaitable[None]],
        label: str,
    ) -> None:
        async def _run() -> None:
            await asyncio.sleep(delay_seconds)
            try:
                await action()
            except Exception as error:
                self._logger.error("Delayed %s failed: %s", label, error, exc_info=True)
                self._publish(_error(f"[ERROR] {label.capitalize()} failed: {sanitize_error(error)}"))

        task = asyncio.ensure_future(_run())
        self._scheduled.add(task)
        task.add_done_callback(self._scheduled.discard)

    def _publish(self, event: OutputEvent) -> None:
        if self._emit is not None:
            self._emit(event)
