import io
import logging
import unittest
from dataclasses import dataclass, field

from app_config_schema import CommandSettings
from commands import LINE_ERROR, OutputEvent
from pomodoro import UserProfile
from runtime import ConsoleRenderer, RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import ClientMessage
from sync import InMemoryStore, StoreUnavailableError, SyncController

UID = "user-1"


@dataclass(frozen=True)
class _AppConfig:
    commands: CommandSettings = field(default_factory=CommandSettings)


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []
        self.states: list[tuple[str, str | None]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))

    def publish_state(self, state: str, *, message=None, **payload):
        self.states.append((state, message))

    def stop(self, timeout_seconds: float = 5.0) -> None:
        self.states.append(("stopped", None))


class _OfflineStore(InMemoryStore):
    async def get_user_document(self, uid: str):
        raise StoreUnavailableError("store offline")


def _line_reader(lines):
    pending = list(lines)

    def read_line():
        return pending.pop(0) if pending else None

    return read_line


class RuntimeEngineTests(unittest.IsolatedAsyncioTestCase):
    def _engine(self, store, lines, *, command_settings=None):
        self.stream = io.StringIO()
        self.ui = _UIServerStub()
        self.controller = SyncController(store, UserProfile(uid=UID, first_name="Ada"))
        return RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("test"),
                app_config=_AppConfig(command_settings or CommandSettings()),
                controller=self.controller,
                ui_server=self.ui,
                console=ConsoleRenderer(self.stream),
                hooks=RuntimeHooks(read_line=_line_reader(lines)),
                tick_interval_seconds=0.01,
            )
        )

    async def test_commands_run_in_order_until_input_closes(self) -> None:
        store = InMemoryStore()
        engine = self._engine(store, ["/theme light", "", "/set work 30"])

        exit_code = await engine.run()

        self.assertEqual(0, exit_code)
        output = self.stream.getvalue()
        self.assertIn("Welcome, Ada.", output)
        self.assertIn("> /theme light\n[LIGHT] Theme set to light.\n", output)
        self.assertIn("[WORK] Work duration set to 30 minutes.", output)
        document = await store.get_user_document(UID)
        self.assertEqual("light", document.settings.theme)
        self.assertEqual(1800, document.settings.work_duration)
        self.assertEqual(1800, engine.timer.state.current_time)

        event_types = [event_type for event_type, _ in self.ui.events]
        self.assertIn("timer", event_types)
        self.assertIn("stats", event_types)
        self.assertIn("sync", event_types)
        self.assertEqual(("stopped", None), self.ui.states[-1])

    async def test_running_timer_ticks(self) -> None:
        engine = self._engine(InMemoryStore(), [])
        await self.controller.hydrate()
        engine.timer.start()
        engine._emit_tick()
        engine._emit_tick()

        self.assertEqual(1498, engine.timer.state.current_time)
        ticks = [payload for event_type, payload in self.ui.events if event_type == "timer"]
        self.assertEqual(1498, ticks[-1]["remaining_seconds"])

    async def test_logout_stops_the_runtime(self) -> None:
        store = InMemoryStore()
        engine = self._engine(
            store,
            ["/logout", "/play"],
            command_settings=CommandSettings(logout_delay_seconds=0.0),
        )

        exit_code = await engine.run()

        self.assertEqual(0, exit_code)
        self.assertIn("[LOGOUT] Signing out...", self.stream.getvalue())
        self.assertIn(("signed_out", "Signed out"), self.ui.states)
        self.assertIsNone(self.controller.profile)

    async def test_completion_requests_publish_suggestions(self) -> None:
        engine = self._engine(InMemoryStore(), [])
        engine._handle_completion_request("/pl")

        event_type, payload = self.ui.events[-1]
        self.assertEqual("suggestions", event_type)
        self.assertEqual("/play ", payload["completion"])
        self.assertEqual("/play", payload["suggestions"][0]["command"])

    async def test_submit_before_start_is_dropped(self) -> None:
        engine = self._engine(InMemoryStore(), [])
        engine.submit_threadsafe(ClientMessage(type="command", text="/play"))
        self.assertFalse(engine.timer.state.is_running)

    async def test_unreachable_store_fails_startup(self) -> None:
        engine = self._engine(_OfflineStore(), ["/play"])

        exit_code = await engine.run()

        self.assertEqual(1, exit_code)
        self.assertIn("Failed to load user data: store offline", self.stream.getvalue())
        self.assertEqual("error", self.ui.events[-1][0])


class ConsoleRendererTests(unittest.TestCase):
    def test_plain_errors_get_prefix(self) -> None:
        stream = io.StringIO()
        ConsoleRenderer(stream).render(
            [OutputEvent(LINE_ERROR, "Command too long"), OutputEvent(LINE_ERROR, "[ERROR] x")]
        )
        self.assertEqual("Error: Command too long\n[ERROR] x\n", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
