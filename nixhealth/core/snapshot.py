"""Environment snapshot shared by all checks in one run.

A ``Snapshot`` is gathered once (see ``nixhealth.services.snapshot``) and
handed to every check unit. Every type here is frozen and list values are
stored as tuples, so one check cannot change what the next one sees.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from urllib.parse import urlsplit

from .structured import as_str_dict
from .version import Version

__all__ = [
    "Arch",
    "ConfigVal",
    "DirenvInfo",
    "FlakeUrl",
    "HostInfo",
    "NixConfig",
    "NixInfo",
    "NixSystem",
    "Snapshot",
    "normalize_url",
]


class Arch(Enum):
    """CPU architecture."""

    X64 = auto()
    ARM64 = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


class NixSystem(Enum):
    """How Nix is installed and configured on this host."""

    NIXOS = auto()
    """https://nixos.org/ (configured through configuration.nix)."""

    NIX_DARWIN = auto()
    """https://github.com/LnL7/nix-darwin (configured through darwin-configuration.nix)."""

    OTHER_LINUX = auto()
    OTHER_MACOS = auto()
    OTHER = auto()

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")

    @property
    def is_macos(self) -> bool:
        return self in (NixSystem.NIX_DARWIN, NixSystem.OTHER_MACOS)

    @property
    def has_configuration_nix(self) -> bool:
        """Nix settings are managed declaratively, not via /etc/nix/nix.conf."""
        return self in (NixSystem.NIXOS, NixSystem.NIX_DARWIN)

    @property
    def configuration_label(self) -> str | None:
        """Name of the declarative configuration file, if any."""
        match self:
            case NixSystem.NIXOS:
                return "/etc/nixos/configuration.nix"
            case NixSystem.NIX_DARWIN:
                return "nix-darwin configuration (darwin-configuration.nix)"
            case _:
                return None


def normalize_url(text: str) -> str:
    """Normalize a cache URL so equal endpoints compare equal.

    ``https://cache.nixos.org`` and ``https://cache.nixos.org/`` both become
    the latter; scheme and host are lower-cased.

    Raises:
        ValueError: If the text has no scheme or host.
    """
    parts = urlsplit(text.strip())
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"invalid URL '{text}'")
    path = parts.path or "/"
    query = f"?{parts.query}" if parts.query else ""
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}{path}{query}"


@dataclass(frozen=True, slots=True)
class ConfigVal[T]:
    """One Nix configuration setting as reported by ``nix show-config``."""

    value: T
    default_value: T | None = None
    description: str = ""


def _entry(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    return as_str_dict(data.get(key)) or {}


def _str_tuple(value: object) -> tuple[str, ...]:
    # Nix reports list settings as JSON arrays; older versions as one string
    if isinstance(value, str):
        return tuple(value.split())
    if isinstance(value, list):
        return tuple(str(v) for v in value)  # pyright: ignore[reportUnknownVariableType, reportUnknownArgumentType]
    return ()


def _str_list_val(data: Mapping[str, object], key: str) -> ConfigVal[tuple[str, ...]]:
    entry = _entry(data, key)
    default = entry.get("defaultValue")
    return ConfigVal(
        value=_str_tuple(entry.get("value")),
        default_value=_str_tuple(default) if default is not None else None,
        description=str(entry.get("description", "")),
    )


def _url_list_val(data: Mapping[str, object], key: str) -> ConfigVal[tuple[str, ...]]:
    raw = _str_list_val(data, key)
    urls: list[str] = []
    for text in raw.value:
        try:
            urls.append(normalize_url(text))
        except ValueError:
            # Nix also accepts store paths and "daemon" here; keep them verbatim
            urls.append(text)
    return ConfigVal(tuple(urls), raw.default_value, raw.description)


def _int_val(data: Mapping[str, object], key: str, fallback: int) -> ConfigVal[int]:
    entry = _entry(data, key)
    value = entry.get("value")
    default = entry.get("defaultValue")
    return ConfigVal(
        value=value if isinstance(value, int) and not isinstance(value, bool) else fallback,
        default_value=default if isinstance(default, int) else None,
        description=str(entry.get("description", "")),
    )


def _str_val(data: Mapping[str, object], key: str, fallback: str) -> ConfigVal[str]:
    entry = _entry(data, key)
    value = entry.get("value")
    default = entry.get("defaultValue")
    return ConfigVal(
        value=value if isinstance(value, str) else fallback,
        default_value=default if isinstance(default, str) else None,
        description=str(entry.get("description", "")),
    )


@dataclass(frozen=True, slots=True)
class NixConfig:
    """The subset of Nix settings the checks look at."""

    experimental_features: ConfigVal[tuple[str, ...]]
    substituters: ConfigVal[tuple[str, ...]]
    trusted_users: ConfigVal[tuple[str, ...]]
    max_jobs: ConfigVal[int]
    system: ConfigVal[str]

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> NixConfig:
        """Build from the ``nix show-config --json`` document.

        Settings missing from the document get Nix's built-in defaults.
        """
        return cls(
            experimental_features=_str_list_val(data, "experimental-features"),
            substituters=_url_list_val(data, "substituters"),
            trusted_users=_str_list_val(data, "trusted-users"),
            max_jobs=_int_val(data, "max-jobs", 1),
            system=_str_val(data, "system", ""),
        )


@dataclass(frozen=True, slots=True)
class NixInfo:
    """The installed Nix and its effective configuration."""

    version: Version
    config: NixConfig


@dataclass(frozen=True, slots=True)
class HostInfo:
    """Facts about the machine and the user running the checks.

    Byte counts are ``None`` when they could not be determined.
    """

    current_user: str
    current_user_groups: tuple[str, ...]
    os: NixSystem
    arch: Arch
    total_memory: int | None
    total_disk_space: int | None


@dataclass(frozen=True, slots=True)
class DirenvInfo:
    """Discovery facts for the direnv companion tool."""

    bin_path: Path
    version: Version | None


@dataclass(frozen=True, slots=True)
class FlakeUrl:
    """Reference to the user's project: a local path or a remote locator."""

    url: str

    def __str__(self) -> str:
        return self.url

    def with_attr(self, attr: str) -> FlakeUrl:
        """Point at ``attr`` of this flake, replacing any attribute already given."""
        return FlakeUrl(f"{self.url.split('#', 1)[0]}#{attr}")

    def as_local_path(self) -> Path | None:
        """Return the local directory this reference points to, if any.

        ``.``, ``/abs/dir``, ``path:/abs/dir`` and ``path:./rel?dir=sub``
        are local; ``github:owner/repo`` and ``https://...`` are not.
        """
        url = self.url.split("#", 1)[0]
        if url.startswith("path:"):
            url = url.removeprefix("path:").split("?", 1)[0]
            return Path(url)
        if url.startswith(("/", ".", "~")):
            return Path(url).expanduser()
        return None


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Everything the checks may look at, gathered once per run."""

    nix: NixInfo
    host: HostInfo
    direnv: DirenvInfo | None = None
