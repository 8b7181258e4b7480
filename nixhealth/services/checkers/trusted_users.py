# SPDX-License-Identifier: MIT
"""Trusted users check.

Only trusted users may add substituters or set restricted options from a
flake's ``nixConfig``, so a project relying on its own cache needs the
current user to be trusted.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import ClassVar

from nixhealth.core.snapshot import HostInfo, Snapshot

from .base import Outcome
from .common import NIX_CONF, RESTART_DAEMON, join_values, read_switches


@dataclass(frozen=True, slots=True)
class TrustedUsers:
    """Check that the current user is in ``trusted-users``."""

    KEY: ClassVar[str] = "trusted-users"
    TITLE: ClassVar[str] = "Trusted Users"

    enable: bool = True
    required: bool = True

    @classmethod
    def from_dict(cls, table: Mapping[str, object]) -> TrustedUsers:
        defaults = cls()
        enable, required = read_switches(
            table, enable=defaults.enable, required=defaults.required
        )
        return cls(enable=enable, required=required)

    def to_dict(self) -> dict[str, object]:
        return {"enable": self.enable, "required": self.required}


def split_trusted(entries: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split ``trusted-users`` entries into (users, groups).

    ``@wheel`` names the group ``wheel``; anything else is a user name.
    """
    users: list[str] = []
    groups: list[str] = []
    for entry in entries:
        if entry.startswith("@"):
            groups.append(entry[1:])
        else:
            users.append(entry)
    return users, groups


def is_trusted(entries: Sequence[str], host: HostInfo) -> bool:
    users, groups = split_trusted(entries)
    if host.current_user in users:
        return True
    return any(g in host.current_user_groups for g in groups)


def _suggestion(host: HostInfo) -> str:
    user = host.current_user
    label = host.os.configuration_label
    if label is not None:
        return f'Add `nix.settings.trusted-users = [ "root" "{user}" ];` to your {label}'
    return f"Set `trusted-users = root {user}` in {NIX_CONF} and then {RESTART_DAEMON}"


def check_trusted_users(unit: TrustedUsers, snapshot: Snapshot) -> tuple[Outcome, ...]:
    entries = snapshot.nix.config.trusted_users.value
    host = snapshot.host
    info = f"trusted-users = {join_values(entries)}"
    if is_trusted(entries, host):
        return (Outcome.passing(unit.TITLE, info, required=unit.required),)
    return (
        Outcome.failing(
            unit.TITLE,
            info,
            f"User '{host.current_user}' not present in trusted_users",
            _suggestion(host),
            required=unit.required,
        ),
    )
