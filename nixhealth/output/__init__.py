"""Output layer: console abstraction, report rendering and log setup."""

from .console import ConsoleProtocol, Line, MockConsole, RichConsole, Style

__all__ = [
    "ConsoleProtocol",
    "Line",
    "MockConsole",
    "RichConsole",
    "Style",
]
