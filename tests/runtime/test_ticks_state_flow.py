import io
import logging
import unittest

from commands import LINE_SYSTEM
from pomodoro import PomodoroSnapshot, PomodoroTick
from runtime.console import ConsoleRenderer
from runtime.messages import format_duration, timer_status_message
from runtime.ticks import TickDependencies, TickProcessor
from runtime.ui import RuntimeUIPublisher


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []
        self.states: list[tuple[str, str | None, dict[str, object]]] = []
        self.trace: list[tuple[str, str]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))
        self.trace.append(("event", event_type))

    def publish_state(self, state: str, *, message=None, **payload):
        self.states.append((state, message, payload))
        self.trace.append(("state", state))


def _snapshot(**overrides) -> PomodoroSnapshot:
    values = {
        "phase": "work",
        "break_kind": None,
        "session": "Focus Session",
        "is_running": True,
        "duration_seconds": 1500,
        "remaining_seconds": 1499,
        "pomodoro_count": 0,
    }
    values.update(overrides)
    return PomodoroSnapshot(**values)


class TickStateFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ui = _UIServerStub()
        self.stream = io.StringIO()
        self.sound = True
        self.completed_calls: list[str] = []
        self.processor = TickProcessor(
            TickDependencies(
                logger=logging.getLogger("test"),
                ui=RuntimeUIPublisher(self.ui),
                console=ConsoleRenderer(self.stream),
                sound_enabled=lambda: self.sound,
                publish_idle_state=lambda: self.ui.publish_state("idle"),
                on_completed=lambda: self.completed_calls.append("settle"),
            )
        )

    def test_running_tick_publishes_timer_only(self) -> None:
        self.processor.handle_tick(PomodoroTick(snapshot=_snapshot()))

        self.assertEqual([("event", "timer")], self.ui.trace)
        payload = self.ui.events[0][1]
        self.assertEqual("tick", payload["action"])
        self.assertEqual(1499, payload["remaining_seconds"])
        self.assertNotIn("break_kind", payload)
        self.assertEqual("", self.stream.getvalue())
        self.assertEqual([], self.completed_calls)

    def test_work_completion_announces_chimes_then_goes_idle(self) -> None:
        tick = PomodoroTick(
            snapshot=_snapshot(
                phase="break",
                break_kind="short",
                is_running=False,
                duration_seconds=300,
                remaining_seconds=300,
                pomodoro_count=1,
            ),
            completed=True,
            completed_phase="work",
        )
        self.processor.handle_tick(tick)

        self.assertEqual(
            [("event", "timer"), ("event", "output"), ("state", "idle")],
            self.ui.trace,
        )
        timer_payload = self.ui.events[0][1]
        self.assertEqual("completed", timer_payload["action"])
        self.assertEqual("short", timer_payload["break_kind"])
        self.assertEqual(
            "[DONE] Work session complete! Time for a break.",
            timer_payload["message"],
        )
        self.assertEqual(
            {"kind": LINE_SYSTEM, "text": "[DONE] Work session complete! Time for a break."},
            self.ui.events[1][1],
        )
        self.assertEqual(
            "[DONE] Work session complete! Time for a break.\n\a",
            self.stream.getvalue(),
        )
        self.assertEqual(["settle"], self.completed_calls)

    def test_break_completion_without_sound(self) -> None:
        self.sound = False
        tick = PomodoroTick(
            snapshot=_snapshot(is_running=False, remaining_seconds=1500, pomodoro_count=1),
            completed=True,
            completed_phase="break",
        )
        self.processor.handle_tick(tick)

        self.assertEqual("[DONE] Break's over! Ready to focus?\n", self.stream.getvalue())


class RuntimeMessagesTests(unittest.TestCase):
    def test_format_duration(self) -> None:
        self.assertEqual("25:00", format_duration(1500))
        self.assertEqual("00:09", format_duration(9))
        self.assertEqual("00:00", format_duration(-3))

    def test_status_message_tracks_run_state(self) -> None:
        self.assertEqual(
            "Focus Session running (24:59 remaining)",
            timer_status_message(_snapshot()),
        )
        self.assertEqual(
            "Focus Session paused (24:59 remaining)",
            timer_status_message(_snapshot(is_running=False)),
        )
        self.assertEqual(
            "Ready: Focus Session (25:00)",
            timer_status_message(_snapshot(is_running=False, remaining_seconds=1500)),
        )


if __name__ == "__main__":
    unittest.main()
