# SPDX-License-Identifier: MIT
"""Tests for the minimum Nix version check."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from nixhealth.core.snapshot import Snapshot
from nixhealth.core.version import Version
from nixhealth.services.checkers.nix_version import MinNixVersion, check_nix_version

SnapshotFactory = Callable[..., Snapshot]


class TestMinNixVersion:
    def test_new_enough(self, make_snapshot: SnapshotFactory) -> None:
        (outcome,) = check_nix_version(MinNixVersion(), make_snapshot(version="2.13.0"))
        assert outcome.passed
        assert outcome.info == "nix version = 2.13.0"

    def test_too_old(self, make_snapshot: SnapshotFactory) -> None:
        unit = MinNixVersion(min_required=Version(2, 17, 0))

        (outcome,) = check_nix_version(unit, make_snapshot(version="2.13.3"))

        assert outcome.failed
        assert outcome.required is True
        assert outcome.details is not None
        assert "2.13.3" in outcome.details.msg
        assert "2.17.0" in outcome.details.msg
        assert "upgrade-nix" in outcome.details.suggestion


class TestFromDict:
    def test_defaults(self) -> None:
        assert MinNixVersion.from_dict({}) == MinNixVersion()

    def test_override(self) -> None:
        unit = MinNixVersion.from_dict({"min-required": "2.17.0", "required": False})
        assert unit.min_required == Version(2, 17, 0)
        assert unit.required is False
        assert unit.enable is True

    def test_malformed_version(self) -> None:
        with pytest.raises(ValueError, match="invalid version"):
            MinNixVersion.from_dict({"min-required": "latest"})
