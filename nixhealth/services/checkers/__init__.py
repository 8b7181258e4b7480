# SPDX-License-Identifier: MIT
"""Check units for the Nix install.

Each unit is a frozen dataclass holding its own configuration, paired with
a ``check_*`` function producing zero or more outcomes:

- Rosetta: Nix is not emulated on Apple Silicon
- MinNixVersion: Nix is recent enough
- FlakeEnabled: required experimental features are on
- MaxJobs: builds run in parallel
- Caches: official and project caches are configured
- TrustedUsers: the current user is trusted
- System: enough memory and disk space
- Direnv: direnv is installed, recent and allowed in the project
"""

from nixhealth.services.checkers.base import Failed, Outcome, Passed, Verdict, aggregate
from nixhealth.services.checkers.caches import Caches
from nixhealth.services.checkers.direnv import Direnv
from nixhealth.services.checkers.flake_enabled import FlakeEnabled
from nixhealth.services.checkers.max_jobs import MaxJobs
from nixhealth.services.checkers.nix_version import MinNixVersion
from nixhealth.services.checkers.registry import (
    CheckUnit,
    HealthConfig,
    build_registry,
    evaluate,
)
from nixhealth.services.checkers.rosetta import Rosetta
from nixhealth.services.checkers.system import System
from nixhealth.services.checkers.trusted_users import TrustedUsers

__all__ = [
    # Outcome types
    "Failed",
    "Outcome",
    "Passed",
    "Verdict",
    "aggregate",
    # Registry
    "CheckUnit",
    "HealthConfig",
    "build_registry",
    "evaluate",
    # Units
    "Caches",
    "Direnv",
    "FlakeEnabled",
    "MaxJobs",
    "MinNixVersion",
    "Rosetta",
    "System",
    "TrustedUsers",
]
