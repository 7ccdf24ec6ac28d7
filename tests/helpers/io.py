"""I/O helper functions for tests."""

import re

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def plain_output(text: str) -> str:
    """Remove ANSI colour codes and collapse all whitespace to single spaces.

    Rich colours, pads and wraps console output to the terminal width, none of
    which matter to assertions.
    """
    return " ".join(_ANSI_ESCAPE.sub("", text).split())
