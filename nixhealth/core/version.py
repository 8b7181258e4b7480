"""Version triples for Nix and companion tools."""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = ["Version"]

_STRICT_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")
_LOOSE_RE = re.compile(r"\b(\d+)\.(\d+)(?:\.(\d+))?")


@dataclass(frozen=True, slots=True, order=True)
class Version:
    """A ``major.minor.patch`` version, ordered numerically."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse an exact ``X.Y.Z`` string (as written in config).

        Raises:
            ValueError: If ``text`` is not a version triple.
        """
        match = _STRICT_RE.match(text.strip())
        if not match:
            raise ValueError(f"invalid version '{text}' (expected X.Y.Z)")
        major, minor, patch = match.groups()
        return cls(int(major), int(minor), int(patch))

    @classmethod
    def from_output(cls, text: str) -> Version | None:
        """Find the version on the first line of command output.

        Handles ``nix (Nix) 2.18.1`` as well as bare ``2.33.0`` and
        two-part versions such as ``2.4pre20210908`` (patch defaults to 0).
        The last version on the line wins: vendor builds put their own
        release first, as in ``nix (Determinate Nix 3.6.0) 2.29.0``.
        """
        lines = text.strip().splitlines()
        found = _LOOSE_RE.findall(lines[0]) if lines else []
        if not found:
            return None
        major, minor, patch = found[-1]
        return cls(int(major), int(minor), int(patch or 0))
