"""Health run: configuration, orchestration and the resulting report."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from nixhealth.core.config import ConfigError, find_config, load_document
from nixhealth.core.merge import deep_merge
from nixhealth.core.result import Err, Ok, Result
from nixhealth.core.snapshot import FlakeUrl, Snapshot
from nixhealth.core.structured import StrDict, as_str_dict
from nixhealth.platform.process import CommandRunner, run
from nixhealth.services.checkers import (
    CheckUnit,
    HealthConfig,
    Outcome,
    Verdict,
    aggregate,
    build_registry,
    evaluate,
)

__all__ = [
    "HealthReport",
    "HealthService",
    "config_from_document",
    "load_flake_document",
    "load_health_config",
    "run_checks",
]

logger = logging.getLogger(__name__)

UNDETERMINED_MSG = "Unable to determine status"

# Flake output holding a project's override document
FLAKE_ATTR = "nix-health.default"
# Evaluating a remote flake may download it
FLAKE_EVAL_TIMEOUT = 60.0

_NIX_FLAKE_COMMAND = ["nix", "--extra-experimental-features", "nix-command flakes"]
_MISSING_ATTR = "does not provide attribute"


@dataclass(frozen=True, slots=True)
class HealthReport:
    """Outcomes of one run, in registry order, plus their verdict."""

    outcomes: tuple[Outcome, ...]

    @property
    def verdict(self) -> Verdict:
        return aggregate(self.outcomes)

    @property
    def failures(self) -> list[Outcome]:
        return [o for o in self.outcomes if o.failed]

    def to_dict(self) -> dict[str, object]:
        return {
            "verdict": str(self.verdict),
            "checks": [o.to_dict() for o in self.outcomes],
        }


def _fault_outcome(unit: CheckUnit, error: Exception) -> Outcome:
    return Outcome.failing(
        unit.TITLE,
        f"{type(error).__name__}: {error}",
        UNDETERMINED_MSG,
        "Re-run with --verbose for details and report this if it persists",
        required=unit.required,
    )


def run_checks(
    registry: Iterable[CheckUnit],
    snapshot: Snapshot,
    project: FlakeUrl | None = None,
) -> tuple[Outcome, ...]:
    """Evaluate every enabled unit and collect outcomes in registry order.

    An unexpected exception from one unit is turned into a single failing
    outcome for that unit (keeping its ``required`` flag); the other units
    still run.
    """
    outcomes: list[Outcome] = []
    for unit in registry:
        if not unit.enable:
            logger.debug("skipping disabled check: %s", unit.KEY)
            continue
        try:
            produced = evaluate(unit, snapshot, project)
        except Exception as e:
            logger.warning("check '%s' failed unexpectedly: %s", unit.KEY, e)
            logger.debug("traceback for '%s'", unit.KEY, exc_info=e)
            outcomes.append(_fault_outcome(unit, e))
            continue
        logger.debug("check '%s' produced %d outcome(s)", unit.KEY, len(produced))
        outcomes.extend(produced)
    return tuple(outcomes)


def config_from_document(
    override: Mapping[str, object], path: Path | None = None
) -> Result[HealthConfig, ConfigError]:
    """Merge ``override`` onto the defaults and build the typed config."""
    merged = deep_merge(HealthConfig().to_dict(), override)
    try:
        return Ok(HealthConfig.from_dict(merged))
    except ValueError as e:
        return Err(ConfigError(f"Invalid health config: {e}", path=path))


def load_flake_document(
    project: FlakeUrl, runner: CommandRunner | None = None
) -> Result[StrDict | None, ConfigError]:
    """Evaluate the project's ``nix-health.default`` flake output.

    Returns ``Ok(None)`` when the flake does not define the attribute.
    Works for remote flakes too; Nix may have to fetch them first.
    """
    attr = project.with_attr(FLAKE_ATTR)
    logger.debug("evaluating %s", attr)
    result = run(
        [*_NIX_FLAKE_COMMAND, "eval", "--json", str(attr)],
        timeout=FLAKE_EVAL_TIMEOUT,
        runner=runner,
    )
    if isinstance(result, Err):
        if _MISSING_ATTR in result.error.stderr:
            return Ok(None)
        detail = result.error.stderr.strip() or str(result.error)
        return Err(ConfigError(f"Unable to evaluate {attr}: {detail}"))

    try:
        data = as_str_dict(json.loads(result.value))
    except json.JSONDecodeError as e:
        return Err(ConfigError(f"{attr} printed invalid JSON: {e}"))
    if data is None:
        return Err(ConfigError(f"{attr} must evaluate to an attribute set"))
    return Ok(data)


def load_health_config(
    path: Path | None = None,
    project: FlakeUrl | None = None,
    runner: CommandRunner | None = None,
) -> Result[HealthConfig, ConfigError]:
    """Load the health configuration for a run.

    Sources, first match wins:

    1. ``path``, when given
    2. ``nix-health.toml`` or ``nix-health.json`` in a local project directory
    3. the project flake's ``nix-health.default`` output (skipped for a
       local directory without ``flake.nix``)
    4. the defaults
    """
    if path is None and project is not None:
        project_dir = project.as_local_path()
        if project_dir is not None:
            path = find_config(project_dir)

        if path is None and (project_dir is None or (project_dir / "flake.nix").is_file()):
            flake_document = load_flake_document(project, runner)
            if isinstance(flake_document, Err):
                return flake_document
            if flake_document.value is not None:
                return config_from_document(flake_document.value)

    if path is None:
        return Ok(HealthConfig())

    logger.debug("loading health config from %s", path)
    document = load_document(path)
    if isinstance(document, Err):
        return document
    return config_from_document(document.value, path=path)


class HealthService:
    """Runs the configured checks against one snapshot."""

    def __init__(
        self,
        *,
        config: HealthConfig,
        snapshot: Snapshot,
        project: FlakeUrl | None = None,
    ) -> None:
        self._config = config
        self._snapshot = snapshot
        self._project = project

    def run(self) -> HealthReport:
        registry = build_registry(self._config)
        return HealthReport(outcomes=run_checks(registry, self._snapshot, self._project))
