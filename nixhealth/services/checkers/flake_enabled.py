# SPDX-License-Identifier: MIT
"""Experimental features check (flakes and the new CLI)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

from nixhealth.core.snapshot import Snapshot
from nixhealth.core.structured import get_str_list

from .base import Outcome
from .common import join_values, read_switches, setting_suggestion


@dataclass(frozen=True, slots=True)
class FlakeEnabled:
    """Check that every feature in ``required_features`` is enabled.

    Attributes:
        required_features: Names that must appear in ``experimental-features``
    """

    KEY: ClassVar[str] = "flake-enabled"
    TITLE: ClassVar[str] = "Flakes Enabled"

    required_features: tuple[str, ...] = ("flakes", "nix-command")
    enable: bool = True
    required: bool = True

    @classmethod
    def from_dict(cls, table: Mapping[str, object]) -> FlakeEnabled:
        defaults = cls()
        enable, required = read_switches(
            table, enable=defaults.enable, required=defaults.required
        )
        features = get_str_list(table, "required-features")
        return cls(
            required_features=(
                tuple(features) if features is not None else defaults.required_features
            ),
            enable=enable,
            required=required,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "enable": self.enable,
            "required": self.required,
            "required-features": list(self.required_features),
        }


def check_flake_enabled(unit: FlakeEnabled, snapshot: Snapshot) -> tuple[Outcome, ...]:
    enabled = snapshot.nix.config.experimental_features.value
    info = f"experimental-features = {join_values(enabled)}"
    missing = [f for f in unit.required_features if f not in enabled]
    if not missing:
        return (Outcome.passing(unit.TITLE, info, required=unit.required),)

    wanted = join_values(unit.required_features)
    return (
        Outcome.failing(
            unit.TITLE,
            info,
            f"Required experimental features are not enabled (missing: {', '.join(missing)})",
            setting_suggestion(
                snapshot.host.os,
                option=f'nix.settings.experimental-features = "{wanted}";',
                conf_line=f"experimental-features = {wanted}",
            )
            + ". See https://nixos.wiki/wiki/Flakes#Enable_flakes",
            required=unit.required,
        ),
    )
