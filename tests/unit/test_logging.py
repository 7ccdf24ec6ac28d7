"""Unit tests for logging module."""

import unittest
from unittest.mock import MagicMock

from rich.table import Table
from rich.text import Span, Text
from rich.tree import Tree

from outtree.console_logger import ConsoleLogger
from outtree.logging import LogLevel, NullLogger


class TestConsoleLogger(unittest.TestCase):
    """Tests for ConsoleLogger implementation."""

    def setUp(self):
        self._console = MagicMock()
        self._console.print = MagicMock()

        self._logger = ConsoleLogger(self._console)

    def test_logger_accepts_string_message(self):
        self._logger.log(LogLevel.INFO, "skip: out.txt")
        self._console.print.assert_called_once_with("skip: out.txt")

    def test_logger_accepts_rich_renderables(self):
        table = Table(title="Status")
        tree = Tree("root")

        self._logger.log(LogLevel.INFO, table)
        self._logger.log(LogLevel.INFO, tree)

        self.assertEqual(self._console.print.call_count, 2)

    def test_logger_accepts_args_and_kwargs(self):
        self._logger.log(LogLevel.INFO, "msg1", "msg2", style="red", end="")
        self._console.print.assert_called_once_with("msg1", "msg2", style="red", end="")

    def test_default_level_is_info(self):
        self.assertIs(self._logger.level, LogLevel.INFO)

    def test_step_colours_verb(self):
        self._logger.step("skip", "out.txt")

        (text,), _ = self._console.print.call_args
        self.assertIsInstance(text, Text)
        self.assertEqual(text.plain, "skip: out.txt")
        self.assertEqual(text.spans, [Span(0, 5, "green")])

    def test_step_subject_is_not_markup(self):
        self._logger.step("run", "data/[red]raw[/red].csv")

        (text,), _ = self._console.print.call_args
        self.assertEqual(text.plain, "run: data/[red]raw[/red].csv")

    def test_unknown_step_verb_is_bold(self):
        self._logger.step("checked", "out.txt")

        (text,), _ = self._console.print.call_args
        self.assertEqual(text.spans, [Span(0, 8, "bold")])


class TestLoggerLevels(unittest.TestCase):
    def setUp(self):
        self._console = MagicMock()
        self._console.print = MagicMock()

    def test_filters_messages_below_threshold(self):
        """Test that messages below the current level are filtered out."""
        l = ConsoleLogger(self._console, LogLevel.ERROR)
        l.info("msg")

        self._console.print.assert_not_called()

        l.error("error!")
        self._console.print.assert_called_once_with("error!")

    def test_trace_shown_at_trace_level(self):
        l = ConsoleLogger(self._console, LogLevel.TRACE)
        l.trace("edge")
        self._console.print.assert_called_once_with("edge")

    def test_push_and_pop_level(self):
        l = ConsoleLogger(self._console, LogLevel.WARN)
        l.push_level(LogLevel.DEBUG)
        l.debug("visible")
        self.assertIs(l.pop_level(), LogLevel.DEBUG)
        l.debug("hidden")

        self._console.print.assert_called_once_with("visible")

    def test_cannot_pop_base_level(self):
        l = ConsoleLogger(self._console)
        with self.assertRaises(RuntimeError):
            l.pop_level()

    def test_step_filtered_by_level(self):
        l = ConsoleLogger(self._console, LogLevel.ERROR)
        l.step("skip", "out.txt")

        self._console.print.assert_not_called()

        l.step("failed", "out.txt (RuntimeError: boom)", level=LogLevel.ERROR)
        (text,), _ = self._console.print.call_args
        self.assertEqual(text.plain, "failed: out.txt (RuntimeError: boom)")
        self.assertEqual(text.spans, [Span(0, 7, "bold red")])


class TestLogLevel(unittest.TestCase):
    def test_log_level_ordering(self):
        self.assertLess(LogLevel.FATAL.value, LogLevel.ERROR.value)
        self.assertLess(LogLevel.ERROR.value, LogLevel.WARN.value)
        self.assertLess(LogLevel.WARN.value, LogLevel.INFO.value)
        self.assertLess(LogLevel.INFO.value, LogLevel.DEBUG.value)
        self.assertLess(LogLevel.DEBUG.value, LogLevel.TRACE.value)

    def test_parse_is_case_insensitive(self):
        self.assertIs(LogLevel.parse("debug"), LogLevel.DEBUG)
        self.assertIs(LogLevel.parse(" Trace "), LogLevel.TRACE)

    def test_parse_rejects_unknown(self):
        with self.assertRaisesRegex(ValueError, "verbose"):
            LogLevel.parse("verbose")


class TestNullLogger(unittest.TestCase):
    def test_discards_everything(self):
        logger = NullLogger()
        logger.fatal("gone")
        logger.step("run", "gone")
        logger.push_level(LogLevel.TRACE)
        self.assertIs(logger.pop_level(), LogLevel.INFO)


if __name__ == "__main__":
    unittest.main()
