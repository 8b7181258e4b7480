# SPDX-License-Identifier: MIT
"""System resources check (memory and disk space)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

from nixhealth.core.bytesize import format_size, parse_size
from nixhealth.core.snapshot import Snapshot

from .base import Outcome
from .common import read_switches

# 1 TB (decimal) is the disk size recommended for a Nix store
DEFAULT_MIN_DISK_SPACE = 1024 * 1000**3


@dataclass(frozen=True, slots=True)
class System:
    """Check that the host has enough memory and disk space.

    Each threshold is optional; a sub-check only runs when its minimum is
    configured.

    Attributes:
        min_ram: Minimum total memory in bytes
        min_disk_space: Minimum total disk space (of the Nix store) in bytes
    """

    KEY: ClassVar[str] = "system"
    TITLE: ClassVar[str] = "System resources"

    min_ram: int | None = None
    min_disk_space: int | None = DEFAULT_MIN_DISK_SPACE
    enable: bool = True
    required: bool = False

    @classmethod
    def from_dict(cls, table: Mapping[str, object]) -> System:
        """Build from a ``system`` table.

        Sizes are bytes or strings like ``"8GB"``. Because TOML has no null,
        ``false`` (or ``0``) also turns a threshold off.
        """
        defaults = cls()
        enable, required = read_switches(
            table, enable=defaults.enable, required=defaults.required
        )
        return cls(
            min_ram=_read_size(table, "min-ram", defaults.min_ram),
            min_disk_space=_read_size(table, "min-disk-space", defaults.min_disk_space),
            enable=enable,
            required=required,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "enable": self.enable,
            "required": self.required,
            "min-ram": self.min_ram,
            "min-disk-space": self.min_disk_space,
        }


def _read_size(table: Mapping[str, object], key: str, default: int | None) -> int | None:
    if key not in table:
        return default
    value = table[key]
    if value is None or value is False or value == 0:
        return None
    try:
        return parse_size(value)
    except ValueError as e:
        raise ValueError(f"'{key}': {e}") from e


def _size(value: int | None) -> str:
    return format_size(value) if value is not None else "unknown"


def check_system(unit: System, snapshot: Snapshot) -> tuple[Outcome, ...]:
    host = snapshot.host
    outcomes: list[Outcome] = []

    if unit.min_ram is not None:
        total = host.total_memory
        info = f"min ram = {_size(unit.min_ram)}; total = {_size(total)}"
        if total is None:
            outcomes.append(
                Outcome.failing(
                    "RAM",
                    info,
                    "Unable to determine total memory",
                    "Check that this platform reports physical memory",
                    required=unit.required,
                )
            )
        elif total < unit.min_ram:
            outcomes.append(
                Outcome.failing(
                    "RAM",
                    info,
                    f"Total memory is less than {_size(unit.min_ram)}",
                    "Add more memory",
                    required=unit.required,
                )
            )
        else:
            outcomes.append(Outcome.passing("RAM", info, required=unit.required))

    if unit.min_disk_space is not None:
        total = host.total_disk_space
        info = f"min disk space = {_size(unit.min_disk_space)}; total = {_size(total)}"
        if total is None:
            outcomes.append(
                Outcome.failing(
                    "Disk Space",
                    info,
                    "Unable to determine total disk space",
                    "Check that /nix (or /) is mounted and readable",
                    required=unit.required,
                )
            )
        elif total < unit.min_disk_space:
            outcomes.append(
                Outcome.failing(
                    "Disk Space",
                    info,
                    f"Total disk space is less than {_size(unit.min_disk_space)}",
                    "The Nix store requires a lot of disk space. Please add more disk space",
                    required=unit.required,
                )
            )
        else:
            outcomes.append(Outcome.passing("Disk Space", info, required=unit.required))

    return tuple(outcomes)
