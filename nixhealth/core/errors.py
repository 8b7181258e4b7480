"""Error codes for CLI exit status.

These map to shell exit codes and must stay stable: scripts and CI jobs
rely on ``nix-health`` exiting 1 only when a required check failed.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the ``nix-health`` command.

    - 0: All checks passed (possibly with advisory warnings)
    - 1: At least one required check failed
    - 2: Environment error (could not gather Nix or system info)
    - 3: Configuration error (override document invalid)
    """

    OK = 0
    CHECK_FAILED = 1
    ENV_ERROR = 2
    CONFIG_ERROR = 3
