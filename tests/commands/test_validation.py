import unittest

from commands import RateLimiter, sanitize_string, validate_command
from commands.validation import (
    parse_command,
    strip_quotes,
    validate_commit_message,
    validate_session_name,
)


class _FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class SanitizeStringTests(unittest.TestCase):
    def test_escapes_html_specials_and_strips_control_chars(self) -> None:
        self.assertEqual(
            "&lt;a href=&quot;x&quot;&gt;Tom&#x27;s &amp; co&lt;/a&gt;",
            sanitize_string("\x00<a href=\"x\">Tom's & co</a>\x1b "),
        )

    def test_caps_length(self) -> None:
        self.assertEqual(1000, len(sanitize_string("a" * 1500)))

    def test_non_string_is_empty(self) -> None:
        self.assertEqual("", sanitize_string(None))


class ValidateCommandTests(unittest.TestCase):
    def test_accepts_command_with_arguments(self) -> None:
        self.assertTrue(validate_command('/commit "fixed the bug"').is_valid)
        self.assertTrue(validate_command("/reset-data").is_valid)

    def test_whitespace_only_is_empty(self) -> None:
        self.assertEqual("Command cannot be empty", validate_command("   ").error)

    def test_control_characters_only_is_empty(self) -> None:
        self.assertEqual("Command cannot be empty", validate_command("\x01\x02").error)


class ParseCommandTests(unittest.TestCase):
    def test_splits_name_and_arguments(self) -> None:
        parsed = parse_command("/SET  work   30 ")

        self.assertEqual("set", parsed.name)
        self.assertEqual("/SET", parsed.token)
        self.assertEqual(("work", "30"), parsed.args)
        self.assertEqual("work   30", parsed.arg_string)

    def test_strip_quotes_removes_one_pair(self) -> None:
        self.assertEqual("hello", strip_quotes('"hello"'))
        self.assertEqual('say "hi"', strip_quotes("'say \"hi\"'"))
        self.assertEqual("plain", strip_quotes("plain"))


class FieldValidationTests(unittest.TestCase):
    def test_session_name_bounds(self) -> None:
        self.assertEqual("Session name cannot be empty.", validate_session_name("  ").error)
        self.assertEqual(
            "Session name cannot exceed 100 characters.",
            validate_session_name("n" * 101).error,
        )
        self.assertTrue(validate_session_name("n" * 100).is_valid)

    def test_escaping_counts_toward_length(self) -> None:
        self.assertFalse(validate_session_name("&" * 30).is_valid)

    def test_commit_message_bounds(self) -> None:
        self.assertEqual("Commit message cannot be empty.", validate_commit_message("").error)
        self.assertEqual(
            "Commit message cannot exceed 500 characters.",
            validate_commit_message("m" * 501).error,
        )


class RateLimiterTests(unittest.TestCase):
    def test_sliding_window(self) -> None:
        clock = _FakeClock()
        limiter = RateLimiter(max_requests=3, window_seconds=10.0, monotonic_fn=clock)

        self.assertTrue(limiter.is_allowed("a"))
        clock.now = 4.0
        self.assertTrue(limiter.is_allowed("a"))
        self.assertTrue(limiter.is_allowed("a"))
        self.assertFalse(limiter.is_allowed("a"))
        self.assertTrue(limiter.is_allowed("b"))

        clock.now = 10.0
        self.assertTrue(limiter.is_allowed("a"))
        self.assertFalse(limiter.is_allowed("a"))

    def test_rejects_non_positive_limits(self) -> None:
        with self.assertRaises(ValueError):
            RateLimiter(max_requests=0)
        with self.assertRaises(ValueError):
            RateLimiter(window_seconds=0)


if __name__ == "__main__":
    unittest.main()
