# SPDX-License-Identifier: MIT
"""Binary cache (substituters) check."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import ClassVar
from urllib.parse import urlsplit

from nixhealth.core.snapshot import Snapshot, normalize_url
from nixhealth.core.structured import get_str_list

from .base import Outcome
from .common import join_values, read_switches, setting_suggestion

OFFICIAL_CACHE = "https://cache.nixos.org/"


@dataclass(frozen=True, slots=True)
class Caches:
    """Check that the official cache and every required cache are in use.

    Attributes:
        required_caches: Normalized cache URLs that must appear in ``substituters``
    """

    KEY: ClassVar[str] = "caches"
    TITLE: ClassVar[str] = "Nix Caches in use"

    required_caches: tuple[str, ...] = (OFFICIAL_CACHE,)
    enable: bool = True
    required: bool = True

    @classmethod
    def from_dict(cls, table: Mapping[str, object]) -> Caches:
        """Build from a ``caches`` table.

        Older documents list the caches under ``required`` itself
        (``required = ["https://foo.cachix.org"]``); a list there replaces
        ``required-caches`` and leaves the severity at its default. It wins
        over ``required-caches`` because a merged document always carries
        the default ``required-caches``.
        """
        defaults = cls()
        switches = dict(table)
        urls = get_str_list(switches, "required-caches")
        if isinstance(switches.get("required"), list):
            urls = get_str_list(switches, "required")
            del switches["required"]

        enable, required = read_switches(
            switches, enable=defaults.enable, required=defaults.required
        )
        return cls(
            required_caches=(
                tuple(normalize_url(u) for u in urls)
                if urls is not None
                else defaults.required_caches
            ),
            enable=enable,
            required=required,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "enable": self.enable,
            "required": self.required,
            "required-caches": list(self.required_caches),
        }


def _cachix_name(url: str) -> str | None:
    host = urlsplit(url).netloc
    if host.endswith(".cachix.org"):
        return host.removesuffix(".cachix.org")
    return None


def _missing_suggestion(missing: Sequence[str], snapshot: Snapshot) -> str:
    names = [_cachix_name(u) for u in missing]
    if all(names):
        return "Run " + " && ".join(f"`cachix use {n}`" for n in names)

    wanted = [*snapshot.nix.config.substituters.value, *missing]
    quoted = " ".join(f'"{u}"' for u in wanted)
    return setting_suggestion(
        snapshot.host.os,
        option=f"nix.settings.substituters = [ {quoted} ];",
        conf_line=f"substituters = {join_values(wanted)}",
    )


def check_caches(unit: Caches, snapshot: Snapshot) -> tuple[Outcome, ...]:
    active = snapshot.nix.config.substituters.value
    info = f"substituters = {join_values(active)}"

    # Reported on its own: without it, almost nothing is substituted
    if OFFICIAL_CACHE not in active:
        return (
            Outcome.failing(
                unit.TITLE,
                info,
                "You are missing the official cache",
                _missing_suggestion([OFFICIAL_CACHE], snapshot),
                required=unit.required,
            ),
        )

    missing = [u for u in unit.required_caches if u not in active]
    if not missing:
        return (Outcome.passing(unit.TITLE, info, required=unit.required),)

    if len(missing) == 1:
        msg = f"You are missing a required cache: {missing[0]}"
    else:
        msg = f"You are missing required caches: {', '.join(missing)}"
    return (
        Outcome.failing(
            unit.TITLE,
            info,
            msg,
            _missing_suggestion(missing, snapshot),
            required=unit.required,
        ),
    )
