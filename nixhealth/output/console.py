"""Console output for the health report.

The report is written through ``ConsoleProtocol``: ``RichConsole`` renders
it in a terminal, ``MockConsole`` keeps the lines for assertions in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import IO, Protocol

__all__ = [
    "ConsoleProtocol",
    "Line",
    "MockConsole",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """How a report line is rendered."""

    PLAIN = auto()
    PASS = auto()
    FAIL = auto()  # required check failed, or a fatal error
    ADVISORY = auto()  # non-required check failed
    INFO = auto()  # observed config values
    DIM = auto()  # suggestions, hints
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


_RICH_STYLES: dict[Style, str | None] = {
    Style.PLAIN: None,
    Style.PASS: "green bold",
    Style.FAIL: "red bold",
    Style.ADVISORY: "yellow bold",
    Style.INFO: "blue",
    Style.DIM: "dim",
    Style.HEADER: "bold underline",
}


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.PLAIN) -> None:
        """Print one line."""
        ...

    def error(self, message: str, hint: str | None = None) -> None:
        """Print ``error: message`` and, if given, a ``hint:`` line."""
        ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


class RichConsole:
    """Terminal console backed by Rich.

    Lines are printed verbatim: markup is off because suggestions contain
    Nix lists such as ``[ "root" "alice" ]``, and soft wrapping keeps long
    store paths and URLs on one line so they can be copied.
    """

    def __init__(self, *, stderr: bool = False, file: IO[str] | None = None) -> None:
        from rich.console import Console

        self._console = Console(
            file=file, stderr=stderr, highlight=False, markup=False, soft_wrap=True
        )

    def print(self, message: str, style: Style = Style.PLAIN) -> None:
        self._console.print(message, style=_RICH_STYLES[style])

    def error(self, message: str, hint: str | None = None) -> None:
        self._console.print(f"error: {message}", style=_RICH_STYLES[Style.FAIL])
        if hint:
            self._console.print(f"hint: {hint}", style=_RICH_STYLES[Style.DIM])

    def header(self, message: str) -> None:
        self._console.print(message, style=_RICH_STYLES[Style.HEADER])

    def newline(self) -> None:
        self._console.print()


@dataclass(frozen=True, slots=True)
class Line:
    """One line captured by ``MockConsole``."""

    text: str
    style: Style


def _no_lines() -> list[Line]:
    return []


@dataclass
class MockConsole:
    """Console that records lines instead of printing them."""

    lines: list[Line] = field(default_factory=_no_lines)

    def print(self, message: str, style: Style = Style.PLAIN) -> None:
        self.lines.append(Line(message, style))

    def error(self, message: str, hint: str | None = None) -> None:
        self.lines.append(Line(f"error: {message}", Style.FAIL))
        if hint:
            self.lines.append(Line(f"hint: {hint}", Style.DIM))

    def header(self, message: str) -> None:
        self.lines.append(Line(message, Style.HEADER))

    def newline(self) -> None:
        self.lines.append(Line("", Style.PLAIN))

    @property
    def messages(self) -> list[str]:
        return [line.text for line in self.lines]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def find(self, substring: str) -> list[Line]:
        return [line for line in self.lines if substring in line.text]

    def styled(self, style: Style) -> list[str]:
        """Texts of the lines printed with ``style``."""
        return [line.text for line in self.lines if line.style == style]
