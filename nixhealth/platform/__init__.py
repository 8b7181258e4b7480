"""Host detection and process execution."""

from .detection import detect_arch, detect_nix_system
from .process import CommandRunner, DefaultCommandRunner, ProcessError, run

__all__ = [
    "CommandRunner",
    "DefaultCommandRunner",
    "ProcessError",
    "detect_arch",
    "detect_nix_system",
    "run",
]
