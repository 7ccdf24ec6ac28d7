"""Logging infrastructure for outtree.

Provides the Logger interface the executor writes trace lines to, so callers can
inject their own sink instead of writing to a process-wide stream.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod


class LogLevel(enum.Enum):
    """Log verbosity levels for outtree diagnostic messages.

    Lower numeric values represent higher severity / less verbosity.
    """
    FATAL = 0  # Unrecoverable errors (bad target, invalid config)
    ERROR = 1  # Fatal errors plus node failures
    WARN = 2   # Errors plus warnings
    INFO = 3   # Warnings plus skip/run trace lines (default)
    DEBUG = 4  # Info plus execution order and option details
    TRACE = 5  # Debug plus graph construction details

    @classmethod
    def parse(cls, name: str) -> "LogLevel":
        """Look up a level by case-insensitive name.

        Raises:
            ValueError: If the name is not a known level
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(level.name.lower() for level in cls)
            raise ValueError(f"Unknown log level '{name}' (expected one of: {valid})")


class Logger(ABC):
    """Sink for outtree diagnostic output with a stack of active levels."""

    @abstractmethod
    def log(self, level: LogLevel = LogLevel.INFO, *args, **kwargs) -> None:
        """Emit a message if `level` passes the current threshold."""

    @abstractmethod
    def push_level(self, level: LogLevel) -> None:
        """Temporarily switch to a new threshold."""

    @abstractmethod
    def pop_level(self) -> LogLevel:
        """Restore the previous threshold and return the one removed."""

    def fatal(self, *args, **kwargs) -> None:
        self.log(LogLevel.FATAL, *args, **kwargs)

    def error(self, *args, **kwargs) -> None:
        self.log(LogLevel.ERROR, *args, **kwargs)

    def warn(self, *args, **kwargs) -> None:
        self.log(LogLevel.WARN, *args, **kwargs)

    def info(self, *args, **kwargs) -> None:
        self.log(LogLevel.INFO, *args, **kwargs)

    def debug(self, *args, **kwargs) -> None:
        self.log(LogLevel.DEBUG, *args, **kwargs)

    def trace(self, *args, **kwargs) -> None:
        self.log(LogLevel.TRACE, *args, **kwargs)

    def step(self, verb: str, subject: str, level: LogLevel = LogLevel.INFO) -> None:
        """Report what happened to one node, as a `verb: subject` line."""
        self.log(level, f"{verb}: {subject}")


class NullLogger(Logger):
    """Logger that discards everything. Used when no sink is injected."""

    def log(self, level: LogLevel = LogLevel.INFO, *args, **kwargs) -> None:
        pass

    def push_level(self, level: LogLevel) -> None:
        pass

    def pop_level(self) -> LogLevel:
        return LogLevel.INFO
