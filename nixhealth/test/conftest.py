"""Shared fixtures: snapshot factory for check tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from nixhealth.core.snapshot import (
    Arch,
    ConfigVal,
    DirenvInfo,
    HostInfo,
    NixConfig,
    NixInfo,
    NixSystem,
    Snapshot,
)
from nixhealth.core.version import Version

GB = 1000**3

SnapshotFactory = Callable[..., Snapshot]


def build_snapshot(
    *,
    version: str = "2.18.1",
    features: Sequence[str] = ("nix-command", "flakes"),
    substituters: Sequence[str] = ("https://cache.nixos.org/",),
    trusted_users: Sequence[str] = ("root",),
    max_jobs: int = 8,
    system: str = "x86_64-linux",
    user: str = "alice",
    groups: Sequence[str] = ("users",),
    os: NixSystem = NixSystem.OTHER_LINUX,
    arch: Arch = Arch.X64,
    memory: int | None = 16 * GB,
    disk: int | None = 2000 * GB,
    direnv: DirenvInfo | None = None,
) -> Snapshot:
    return Snapshot(
        nix=NixInfo(
            version=Version.parse(version),
            config=NixConfig(
                experimental_features=ConfigVal(tuple(features)),
                substituters=ConfigVal(tuple(substituters)),
                trusted_users=ConfigVal(tuple(trusted_users)),
                max_jobs=ConfigVal(max_jobs),
                system=ConfigVal(system),
            ),
        ),
        host=HostInfo(
            current_user=user,
            current_user_groups=tuple(groups),
            os=os,
            arch=arch,
            total_memory=memory,
            total_disk_space=disk,
        ),
        direnv=direnv,
    )


@pytest.fixture
def make_snapshot() -> SnapshotFactory:
    """Factory for snapshots of a healthy Linux host; override any fact by keyword."""
    return build_snapshot


@pytest.fixture
def direnv_info() -> DirenvInfo:
    return DirenvInfo(bin_path=Path("/usr/bin/direnv"), version=Version(2, 34, 0))
