# SPDX-License-Identifier: MIT
"""Rosetta check for Apple Silicon Macs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

from nixhealth.core.snapshot import Arch, Snapshot

from .base import Outcome
from .common import read_switches

EMULATED_SYSTEM = "x86_64-darwin"


@dataclass(frozen=True, slots=True)
class Rosetta:
    """Check that Nix runs natively on Apple Silicon.

    A Nix installed from an x86_64 shell reports ``system = x86_64-darwin``
    and builds everything through Rosetta emulation.
    """

    KEY: ClassVar[str] = "rosetta"
    TITLE: ClassVar[str] = "Rosetta Not Active"

    enable: bool = True
    required: bool = True

    @classmethod
    def from_dict(cls, table: Mapping[str, object]) -> Rosetta:
        defaults = cls()
        enable, required = read_switches(
            table, enable=defaults.enable, required=defaults.required
        )
        return cls(enable=enable, required=required)

    def to_dict(self) -> dict[str, object]:
        return {"enable": self.enable, "required": self.required}


def check_rosetta(unit: Rosetta, snapshot: Snapshot) -> tuple[Outcome, ...]:
    host = snapshot.host
    if not (host.os.is_macos and host.arch == Arch.ARM64):
        return ()

    system = snapshot.nix.config.system.value
    info = f"system = {system}"
    if system != EMULATED_SYSTEM:
        return (Outcome.passing(unit.TITLE, info, required=unit.required),)
    return (
        Outcome.failing(
            unit.TITLE,
            info,
            "Nix is running under Rosetta emulation on an ARM Mac",
            "Disable Rosetta for your terminal, then reinstall Nix natively (aarch64-darwin)",
            required=unit.required,
        ),
    )
