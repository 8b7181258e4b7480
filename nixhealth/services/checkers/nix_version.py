# SPDX-License-Identifier: MIT
"""Minimum Nix version check."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

from nixhealth.core.snapshot import Snapshot
from nixhealth.core.structured import get_str
from nixhealth.core.version import Version

from .base import Outcome
from .common import read_switches

UPGRADE_URL = "https://nixos.org/manual/nix/stable/command-ref/new-cli/nix3-upgrade-nix.html"


@dataclass(frozen=True, slots=True)
class MinNixVersion:
    """Check that the installed Nix is at least ``min_required``."""

    KEY: ClassVar[str] = "nix-version"
    TITLE: ClassVar[str] = "Minimum Nix Version"

    min_required: Version = Version(2, 13, 0)
    enable: bool = True
    required: bool = True

    @classmethod
    def from_dict(cls, table: Mapping[str, object]) -> MinNixVersion:
        defaults = cls()
        enable, required = read_switches(
            table, enable=defaults.enable, required=defaults.required
        )
        min_text = get_str(table, "min-required")
        return cls(
            min_required=Version.parse(min_text) if min_text else defaults.min_required,
            enable=enable,
            required=required,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "enable": self.enable,
            "required": self.required,
            "min-required": str(self.min_required),
        }


def check_nix_version(unit: MinNixVersion, snapshot: Snapshot) -> tuple[Outcome, ...]:
    val = snapshot.nix.version
    info = f"nix version = {val}"
    if val >= unit.min_required:
        return (Outcome.passing(unit.TITLE, info, required=unit.required),)
    return (
        Outcome.failing(
            unit.TITLE,
            info,
            f"Your Nix version ({val}) is too old; we require at least {unit.min_required}",
            f"See {UPGRADE_URL}",
            required=unit.required,
        ),
    )
