"""Tests for nixhealth.core.snapshot module."""

from __future__ import annotations

from pathlib import Path

import pytest

from nixhealth.core.snapshot import FlakeUrl, NixConfig, NixSystem, normalize_url


SHOW_CONFIG = {
    "experimental-features": {
        "value": ["flakes", "nix-command"],
        "defaultValue": [],
        "description": "Experimental features that are enabled.",
    },
    "substituters": {
        "value": ["https://cache.nixos.org", "https://Nix-Community.cachix.org/"],
        "defaultValue": ["https://cache.nixos.org/"],
        "description": "",
    },
    "trusted-users": {"value": ["root", "@wheel"], "defaultValue": ["root"]},
    "max-jobs": {"value": 4, "defaultValue": 1},
    "system": {"value": "aarch64-darwin"},
}


class TestNormalizeUrl:
    def test_trailing_slash_added(self) -> None:
        assert normalize_url("https://cache.nixos.org") == "https://cache.nixos.org/"

    def test_host_lowercased(self) -> None:
        assert normalize_url("HTTPS://Cache.NixOS.org/") == "https://cache.nixos.org/"

    def test_path_kept(self) -> None:
        assert normalize_url("s3://bucket/prefix") == "s3://bucket/prefix"

    @pytest.mark.parametrize("text", ["daemon", "/nix/store", "cache.nixos.org"])
    def test_rejects_non_urls(self, text: str) -> None:
        with pytest.raises(ValueError, match="invalid URL"):
            normalize_url(text)


class TestNixConfig:
    def test_from_show_config(self) -> None:
        config = NixConfig.from_dict(SHOW_CONFIG)

        assert config.experimental_features.value == ("flakes", "nix-command")
        assert config.substituters.value == (
            "https://cache.nixos.org/",
            "https://nix-community.cachix.org/",
        )
        assert config.substituters.default_value == ("https://cache.nixos.org/",)
        assert config.trusted_users.value == ("root", "@wheel")
        assert config.max_jobs.value == 4
        assert config.system.value == "aarch64-darwin"

    def test_missing_settings_use_fallbacks(self) -> None:
        config = NixConfig.from_dict({})

        assert config.experimental_features.value == ()
        assert config.max_jobs.value == 1
        assert config.system.value == ""

    def test_space_separated_string_values(self) -> None:
        config = NixConfig.from_dict(
            {"experimental-features": {"value": "nix-command flakes"}}
        )
        assert config.experimental_features.value == ("nix-command", "flakes")

    def test_non_url_substituters_kept_verbatim(self) -> None:
        config = NixConfig.from_dict({"substituters": {"value": ["daemon"]}})
        assert config.substituters.value == ("daemon",)


class TestNixSystem:
    def test_configuration_labels(self) -> None:
        assert NixSystem.NIXOS.configuration_label == "/etc/nixos/configuration.nix"
        assert NixSystem.NIX_DARWIN.configuration_label is not None
        assert NixSystem.OTHER_LINUX.configuration_label is None

    def test_is_macos(self) -> None:
        assert NixSystem.NIX_DARWIN.is_macos
        assert NixSystem.OTHER_MACOS.is_macos
        assert not NixSystem.NIXOS.is_macos

    def test_str(self) -> None:
        assert str(NixSystem.NIX_DARWIN) == "nix-darwin"


class TestFlakeUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            (".", Path(".")),
            ("/home/alice/project", Path("/home/alice/project")),
            ("/home/alice/project#default", Path("/home/alice/project")),
            ("path:/srv/flake?dir=sub", Path("/srv/flake")),
        ],
    )
    def test_local(self, url: str, expected: Path) -> None:
        assert FlakeUrl(url).as_local_path() == expected

    @pytest.mark.parametrize(
        "url", ["github:juspay/omnix", "https://example.com/flake.tar.gz"]
    )
    def test_remote(self, url: str) -> None:
        assert FlakeUrl(url).as_local_path() is None

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("github:juspay/omnix", "github:juspay/omnix#nix-health.default"),
            (".#devShells.default", ".#nix-health.default"),
        ],
    )
    def test_with_attr(self, url: str, expected: str) -> None:
        assert FlakeUrl(url).with_attr("nix-health.default") == FlakeUrl(expected)
