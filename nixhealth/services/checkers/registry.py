# SPDX-License-Identifier: MIT
"""Check registry: configured units in their evaluation order.

The set of check kinds is closed. ``CheckUnit`` is a union of the unit
dataclasses and ``evaluate`` dispatches with ``match`` ending in
``assert_never``, so a unit added to the union but not to ``evaluate`` is
a type error.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import assert_never

from nixhealth.core.snapshot import FlakeUrl, Snapshot
from nixhealth.core.structured import StrDict, get_table

from .base import Outcome
from .caches import Caches, check_caches
from .direnv import Direnv, check_direnv
from .flake_enabled import FlakeEnabled, check_flake_enabled
from .max_jobs import MaxJobs, check_max_jobs
from .nix_version import MinNixVersion, check_nix_version
from .rosetta import Rosetta, check_rosetta
from .system import System, check_system
from .trusted_users import TrustedUsers, check_trusted_users

__all__ = [
    "CheckUnit",
    "HealthConfig",
    "build_registry",
    "evaluate",
]

CheckUnit = (
    Rosetta
    | MinNixVersion
    | FlakeEnabled
    | MaxJobs
    | Caches
    | TrustedUsers
    | System
    | Direnv
)


@dataclass(frozen=True, slots=True)
class HealthConfig:
    """Configuration of every check unit.

    Each field corresponds to one top-level key of the override document
    (``nix-version``, ``caches``, ...). Missing keys keep their defaults,
    unknown keys are ignored.
    """

    rosetta: Rosetta = field(default_factory=Rosetta)
    nix_version: MinNixVersion = field(default_factory=MinNixVersion)
    flake_enabled: FlakeEnabled = field(default_factory=FlakeEnabled)
    max_jobs: MaxJobs = field(default_factory=MaxJobs)
    caches: Caches = field(default_factory=Caches)
    trusted_users: TrustedUsers = field(default_factory=TrustedUsers)
    system: System = field(default_factory=System)
    direnv: Direnv = field(default_factory=Direnv)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> HealthConfig:
        """Create HealthConfig from a (merged) document.

        Raises:
            ValueError: If a unit table holds an invalid value, e.g. a
                malformed version or URL. The message names the unit key.
        """

        def build[U](key: str, parse: Callable[[StrDict], U]) -> U:
            try:
                return parse(get_table(data, key) or {})
            except ValueError as e:
                raise ValueError(f"{key}: {e}") from e

        return cls(
            rosetta=build(Rosetta.KEY, Rosetta.from_dict),
            nix_version=build(MinNixVersion.KEY, MinNixVersion.from_dict),
            flake_enabled=build(FlakeEnabled.KEY, FlakeEnabled.from_dict),
            max_jobs=build(MaxJobs.KEY, MaxJobs.from_dict),
            caches=build(Caches.KEY, Caches.from_dict),
            trusted_users=build(TrustedUsers.KEY, TrustedUsers.from_dict),
            system=build(System.KEY, System.from_dict),
            direnv=build(Direnv.KEY, Direnv.from_dict),
        )

    def to_dict(self) -> StrDict:
        """Document form of this configuration (the defaults, when unmodified)."""
        return {unit.KEY: unit.to_dict() for unit in build_registry(self)}


def build_registry(config: HealthConfig) -> tuple[CheckUnit, ...]:
    """Return the configured units in evaluation (and display) order.

    Foundational checks come first: on a Mac running Nix under Rosetta, or
    with an outdated Nix, the remaining results are of little use.
    """
    return (
        config.rosetta,
        config.nix_version,
        config.flake_enabled,
        config.max_jobs,
        config.caches,
        config.trusted_users,
        config.system,
        config.direnv,
    )


def evaluate(unit: CheckUnit, snapshot: Snapshot, project: FlakeUrl | None) -> tuple[Outcome, ...]:
    """Evaluate one unit against the snapshot (ignores ``enable``)."""
    match unit:
        case Rosetta():
            return check_rosetta(unit, snapshot)
        case MinNixVersion():
            return check_nix_version(unit, snapshot)
        case FlakeEnabled():
            return check_flake_enabled(unit, snapshot)
        case MaxJobs():
            return check_max_jobs(unit, snapshot)
        case Caches():
            return check_caches(unit, snapshot)
        case TrustedUsers():
            return check_trusted_users(unit, snapshot)
        case System():
            return check_system(unit, snapshot)
        case Direnv():
            return check_direnv(unit, snapshot, project)
        case _:
            assert_never(unit)
