"""Script kinds and text helpers shared by every action generator."""

from __future__ import annotations

from enum import Enum


class ScriptKind(str, Enum):
    """How a generated script body is executed.

    SHELL       — ``.sh`` file, mode 0755, run with the configured shell
    APPLESCRIPT — ``.applescript`` source, run with osascript
    """

    SHELL = "shell"
    APPLESCRIPT = "applescript"

    @property
    def extension(self) -> str:
        return "sh" if self is ScriptKind.SHELL else "applescript"

    @property
    def needs_exec_bit(self) -> bool:
        return self is ScriptKind.SHELL


SHELL_HEADER = "#!/bin/bash"


def escape_quotes(text: str) -> str:
    """Escape double quotes for embedding in a double-quoted script string."""
    return text.replace('"', '\\"')


def shell_script(*lines: str) -> str:
    return "\n".join([SHELL_HEADER, *lines]) + "\n"


def applescript(*lines: str) -> str:
    return "\n".join(lines) + "\n"
