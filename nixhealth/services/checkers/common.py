# SPDX-License-Identifier: MIT
"""Common utilities for check units.

- Reading the ``enable``/``required`` switches every unit supports
- Suggestions that depend on how Nix is configured on the host
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from nixhealth.core.snapshot import NixSystem
from nixhealth.core.structured import get_bool

NIX_CONF = "/etc/nix/nix.conf"
RESTART_DAEMON = "restart the Nix daemon using `sudo pkill nix-daemon`"


def read_switches(
    table: Mapping[str, object], *, enable: bool, required: bool
) -> tuple[bool, bool]:
    """Read ``enable`` and ``required`` from a unit table, with defaults.

    Raises:
        ValueError: If either switch is present but not a boolean.
    """
    enable_value = get_bool(table, "enable")
    required_value = get_bool(table, "required")
    return (
        enable if enable_value is None else enable_value,
        required if required_value is None else required_value,
    )


def setting_suggestion(os: NixSystem, *, option: str, conf_line: str) -> str:
    """Suggest how to change a Nix setting on this host.

    Hosts with a declarative configuration (NixOS, nix-darwin) must not
    edit /etc/nix/nix.conf by hand; they get the module option instead.

    Example:
        setting_suggestion(os, option='nix.settings.max-jobs = "auto";',
                           conf_line="max-jobs = auto")
    """
    label = os.configuration_label
    if label is not None:
        return f"Add `{option}` to your {label}"
    return f"Set `{conf_line}` in {NIX_CONF} and then {RESTART_DAEMON}"


def join_values(values: Iterable[str]) -> str:
    """Render a list setting the way nix.conf writes it."""
    return " ".join(values)
