from rich.console import Console
from rich.text import Text

from outtree.logging import Logger, LogLevel

# Colour of the verb in `verb: output` step lines
STEP_STYLES = {
    "skip": "green",
    "exist": "green",
    "run": "cyan",
    "would run": "yellow",
    "missing": "bold red",
    "failed": "bold red",
}


class ConsoleLogger(Logger):
    """Logger printing to a Rich console, filtered by a stack of levels.

    Step lines from the executor get a coloured verb. Output identities are
    printed as plain text, so paths containing brackets are never read as
    Rich markup.
    """

    def __init__(self, console: Console, level: LogLevel = LogLevel.INFO) -> None:
        self._console = console
        self._levels = [level]

    @property
    def level(self) -> LogLevel:
        return self._levels[-1]

    def enabled(self, level: LogLevel) -> bool:
        return self._levels[-1].value >= level.value

    def log(self, level: LogLevel = LogLevel.INFO, *args, **kwargs) -> None:
        """Print to the console if `level` meets the current threshold.

        Args:
            level: The severity level of this message (default: INFO)
            *args: Positional arguments passed to Rich Console.print()
            **kwargs: Keyword arguments passed to Rich Console.print()
        """
        if self.enabled(level):
            self._console.print(*args, **kwargs)

    def step(self, verb: str, subject: str, level: LogLevel = LogLevel.INFO) -> None:
        if self.enabled(level):
            style = STEP_STYLES.get(verb, "bold")
            self._console.print(Text.assemble((f"{verb}:", style), " ", subject))

    def push_level(self, level: LogLevel) -> None:
        self._levels.append(level)

    def pop_level(self) -> LogLevel:
        """Return to the previous level.

        Raises:
            RuntimeError: If attempting to pop the base (initial) log level
        """
        if len(self._levels) <= 1:
            raise RuntimeError("Cannot pop the base log level")
        return self._levels.pop()
