import unittest
from dataclasses import replace

from pomodoro import SessionRecord, Settings, Stats
from pomodoro.service import PomodoroTimer, derive_phase_duration


class _LocalSink:
    def __init__(self, settings: Settings | None = None, stats: Stats | None = None):
        self.settings = settings or Settings()
        self.stats = stats or Stats()
        self.records: list[SessionRecord] = []

    def apply_settings(self, settings: Settings) -> None:
        self.settings = settings

    def apply_stats(self, stats: Stats) -> None:
        self.stats = stats

    def append_session_record(self, record: SessionRecord) -> None:
        self.records.append(record)


def _run_ticks(timer: PomodoroTimer, count: int):
    ticks = []
    for _ in range(count):
        tick = timer.tick()
        if tick is not None:
            ticks.append(tick)
    return ticks


class PomodoroTimerCharacterizationTests(unittest.TestCase):
    def test_fresh_timer_is_idle_work_at_full_duration(self) -> None:
        timer = PomodoroTimer(_LocalSink())
        snapshot = timer.snapshot()

        self.assertEqual("work", snapshot.phase)
        self.assertFalse(snapshot.is_running)
        self.assertEqual(1500, snapshot.duration_seconds)
        self.assertEqual(1500, snapshot.remaining_seconds)
        self.assertEqual("Focus Session", snapshot.session)

    def test_start_rejected_when_already_running(self) -> None:
        timer = PomodoroTimer(_LocalSink())
        first = timer.start()
        second = timer.start()

        self.assertTrue(first.accepted)
        self.assertEqual("started", first.reason)
        self.assertFalse(second.accepted)
        self.assertEqual("already_running", second.reason)

    def test_pause_rejected_when_not_running(self) -> None:
        timer = PomodoroTimer(_LocalSink())
        result = timer.pause()
        self.assertFalse(result.accepted)
        self.assertEqual("not_running", result.reason)

    def test_pause_then_start_reports_resume_and_keeps_remaining(self) -> None:
        timer = PomodoroTimer(_LocalSink())
        timer.start()
        _run_ticks(timer, 3)
        pause_result = timer.pause()
        resume_result = timer.start()

        self.assertEqual(1497, pause_result.snapshot.remaining_seconds)
        self.assertEqual("resumed", resume_result.reason)
        self.assertEqual(1497, resume_result.snapshot.remaining_seconds)

    def test_tick_is_none_while_stopped(self) -> None:
        timer = PomodoroTimer(_LocalSink())
        self.assertIsNone(timer.tick())

    def test_countdown_is_monotonic_and_bounded(self) -> None:
        timer = PomodoroTimer(_LocalSink(Settings(work_duration=60)))
        timer.start()
        previous = timer.state.current_time
        for tick in _run_ticks(timer, 59):
            self.assertLess(tick.snapshot.remaining_seconds, previous)
            self.assertGreaterEqual(tick.snapshot.remaining_seconds, 0)
            previous = tick.snapshot.remaining_seconds

    def test_full_work_phase_completes_exactly_once(self) -> None:
        sink = _LocalSink()
        timer = PomodoroTimer(sink)
        timer.start()

        ticks = _run_ticks(timer, 1500)
        completed = [tick for tick in ticks if tick.completed]

        self.assertEqual(1500, len(ticks))
        self.assertEqual(1, len(completed))
        self.assertEqual("work", completed[0].completed_phase)
        self.assertEqual(1, sink.stats.completed_today)
        self.assertEqual(25, sink.stats.total_focus_time)
        self.assertEqual(1, sink.stats.current_streak)
        self.assertEqual(1, len(sink.stats.history))
        self.assertEqual("Focus Session", sink.stats.history[0].session_name)
        self.assertEqual(25, sink.stats.history[0].duration_minutes)

        state = timer.state
        self.assertTrue(state.is_break)
        self.assertFalse(state.is_running)
        self.assertEqual(1, state.pomodoro_count)
        self.assertEqual(300, state.current_time)
        self.assertEqual(300, state.total_time)
        self.assertEqual("Short Break", sink.settings.session_name)
        self.assertIsNone(timer.tick())

    def test_every_fourth_work_phase_is_followed_by_long_break(self) -> None:
        sink = _LocalSink(Settings(work_duration=2, break_duration=1, long_break_duration=3))
        timer = PomodoroTimer(sink)

        break_kinds = []
        for _ in range(8):
            timer.start()
            while not timer.state.is_break:
                timer.tick()
            break_kinds.append(timer.snapshot().break_kind)
            timer.start()
            while timer.state.is_break:
                timer.tick()

        self.assertEqual(
            ["short", "short", "short", "long", "short", "short", "short", "long"],
            break_kinds,
        )
        self.assertEqual(8, sink.stats.completed_today)

    def test_long_break_uses_long_duration_and_session_name(self) -> None:
        sink = _LocalSink(Settings(work_duration=1, break_duration=1, long_break_duration=7))
        timer = PomodoroTimer(sink)
        for _ in range(3):
            timer.start()
            timer.tick()
            timer.start()
            timer.tick()
        timer.start()
        timer.tick()

        self.assertEqual(4, timer.state.pomodoro_count)
        self.assertEqual(7, timer.state.total_time)
        self.assertEqual("Long Break", sink.settings.session_name)

    def test_break_completion_returns_to_work(self) -> None:
        sink = _LocalSink(Settings(work_duration=1, break_duration=2))
        timer = PomodoroTimer(sink)
        timer.start()
        timer.tick()
        timer.start()
        ticks = _run_ticks(timer, 2)

        self.assertTrue(ticks[-1].completed)
        self.assertEqual("break", ticks[-1].completed_phase)
        self.assertFalse(timer.state.is_break)
        self.assertEqual("Focus Session", sink.settings.session_name)
        # Breaks are recorded but do not count as completed pomodoros.
        self.assertEqual(1, sink.stats.completed_today)
        self.assertEqual(2, len(sink.stats.history))
        self.assertTrue(sink.stats.history[-1].is_break)

    def test_set_durations_rederives_clock_when_stopped(self) -> None:
        sink = _LocalSink()
        timer = PomodoroTimer(sink)
        result = timer.set_durations(work=40)

        self.assertTrue(result.accepted)
        self.assertEqual(2400, sink.settings.work_duration)
        self.assertEqual(2400, timer.state.current_time)
        self.assertEqual(2400, timer.state.total_time)

    def test_set_durations_keeps_clock_while_running(self) -> None:
        sink = _LocalSink()
        timer = PomodoroTimer(sink)
        timer.start()
        _run_ticks(timer, 10)
        timer.set_durations(work=40)

        self.assertEqual(2400, sink.settings.work_duration)
        self.assertEqual(1490, timer.state.current_time)
        self.assertEqual(1500, timer.state.total_time)

    def test_set_break_then_reset_during_break_uses_new_duration(self) -> None:
        sink = _LocalSink(Settings(work_duration=1))
        timer = PomodoroTimer(sink)
        timer.start()
        timer.tick()

        timer.set_durations(short_break=10)
        result = timer.reset()

        self.assertTrue(timer.state.is_break)
        self.assertEqual(600, result.snapshot.remaining_seconds)
        self.assertEqual(600, result.snapshot.duration_seconds)

    def test_reset_restores_full_duration_and_stops(self) -> None:
        timer = PomodoroTimer(_LocalSink())
        timer.start()
        _run_ticks(timer, 5)
        result = timer.reset()

        self.assertTrue(result.accepted)
        self.assertFalse(result.snapshot.is_running)
        self.assertEqual(1500, result.snapshot.remaining_seconds)

    def test_reset_of_started_work_phase_breaks_streak(self) -> None:
        sink = _LocalSink(stats=Stats(current_streak=3, longest_streak=5))
        timer = PomodoroTimer(sink)
        timer.start()
        timer.tick()
        timer.reset()

        self.assertEqual(0, sink.stats.current_streak)
        self.assertEqual(5, sink.stats.longest_streak)

    def test_reset_of_untouched_phase_keeps_streak(self) -> None:
        sink = _LocalSink(stats=Stats(current_streak=3, longest_streak=5))
        timer = PomodoroTimer(sink)
        timer.reset()
        self.assertEqual(3, sink.stats.current_streak)

    def test_complete_rejected_for_untouched_phase(self) -> None:
        sink = _LocalSink()
        timer = PomodoroTimer(sink)
        result = timer.complete()

        self.assertFalse(result.accepted)
        self.assertEqual("not_started", result.reason)
        self.assertEqual(0, sink.stats.completed_today)

    def test_complete_transitions_like_natural_completion(self) -> None:
        sink = _LocalSink()
        timer = PomodoroTimer(sink)
        timer.start()
        _run_ticks(timer, 30)
        result = timer.complete()

        self.assertTrue(result.accepted)
        self.assertIsNotNone(result.record)
        self.assertFalse(result.record.is_break)
        self.assertTrue(timer.state.is_break)
        self.assertFalse(timer.state.is_running)
        self.assertEqual(1, sink.stats.completed_today)

    def test_complete_accepted_for_paused_phase(self) -> None:
        timer = PomodoroTimer(_LocalSink())
        timer.start()
        timer.tick()
        timer.pause()
        self.assertTrue(timer.complete().accepted)

    def test_session_name_change_restarts_idle_countdown(self) -> None:
        sink = _LocalSink()
        timer = PomodoroTimer(sink)
        timer.start()
        timer.tick()
        timer.pause()
        timer.set_session_name("Deep Work")

        self.assertEqual("Deep Work", sink.settings.session_name)
        self.assertEqual(1500, timer.state.current_time)
        self.assertEqual("Deep Work", timer.snapshot().session)

    def test_theme_and_sound_toggle_without_argument(self) -> None:
        sink = _LocalSink()
        timer = PomodoroTimer(sink)

        timer.set_theme()
        self.assertEqual("light", sink.settings.theme)
        timer.set_theme("dark")
        self.assertEqual("dark", sink.settings.theme)
        timer.set_sound()
        self.assertFalse(sink.settings.sound_enabled)
        timer.set_sound(True)
        self.assertTrue(sink.settings.sound_enabled)

    def test_resync_rederives_stopped_clock_after_external_change(self) -> None:
        sink = _LocalSink()
        timer = PomodoroTimer(sink)
        sink.settings = replace(sink.settings, work_duration=900)

        self.assertTrue(timer.resync())
        self.assertEqual(900, timer.state.current_time)
        self.assertFalse(timer.resync())

    def test_resync_leaves_running_clock_alone(self) -> None:
        sink = _LocalSink()
        timer = PomodoroTimer(sink)
        timer.start()
        sink.settings = replace(sink.settings, work_duration=900)

        self.assertFalse(timer.resync())
        self.assertEqual(1500, timer.state.total_time)

    def test_discard_returns_to_fresh_work_phase(self) -> None:
        sink = _LocalSink(Settings(work_duration=1))
        timer = PomodoroTimer(sink)
        timer.start()
        timer.tick()
        timer.discard()

        self.assertFalse(timer.state.is_break)
        self.assertEqual(0, timer.state.pomodoro_count)
        self.assertFalse(timer.state.is_running)


class DerivePhaseDurationTests(unittest.TestCase):
    def test_work_phase_uses_work_duration(self) -> None:
        settings = Settings(work_duration=100, break_duration=20, long_break_duration=50)
        self.assertEqual(100, derive_phase_duration(settings, False, 4))

    def test_break_duration_depends_on_count(self) -> None:
        settings = Settings(work_duration=100, break_duration=20, long_break_duration=50)
        self.assertEqual(20, derive_phase_duration(settings, True, 1))
        self.assertEqual(20, derive_phase_duration(settings, True, 3))
        self.assertEqual(50, derive_phase_duration(settings, True, 4))
        self.assertEqual(50, derive_phase_duration(settings, True, 8))

    def test_zero_count_break_is_short(self) -> None:
        self.assertEqual(300, derive_phase_duration(Settings(), True, 0))


if __name__ == "__main__":
    unittest.main()
