# SPDX-License-Identifier: MIT
"""Parallel build jobs check."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

from nixhealth.core.snapshot import Snapshot

from .base import Outcome
from .common import read_switches, setting_suggestion


@dataclass(frozen=True, slots=True)
class MaxJobs:
    """Check that Nix may run more than one build job at a time."""

    KEY: ClassVar[str] = "max-jobs"
    TITLE: ClassVar[str] = "Max Jobs"

    enable: bool = True
    required: bool = False

    @classmethod
    def from_dict(cls, table: Mapping[str, object]) -> MaxJobs:
        defaults = cls()
        enable, required = read_switches(
            table, enable=defaults.enable, required=defaults.required
        )
        return cls(enable=enable, required=required)

    def to_dict(self) -> dict[str, object]:
        return {"enable": self.enable, "required": self.required}


def check_max_jobs(unit: MaxJobs, snapshot: Snapshot) -> tuple[Outcome, ...]:
    jobs = snapshot.nix.config.max_jobs.value
    info = f"max-jobs = {jobs}"
    if jobs > 1:
        return (Outcome.passing(unit.TITLE, info, required=unit.required),)

    if jobs == 1:
        msg = "You are using only 1 core for nix builds"
    else:
        msg = "Local builds are disabled (max-jobs = 0)"
    return (
        Outcome.failing(
            unit.TITLE,
            info,
            msg,
            setting_suggestion(
                snapshot.host.os,
                option='nix.settings.max-jobs = "auto";',
                conf_line="max-jobs = auto",
            ),
            required=unit.required,
        ),
    )
