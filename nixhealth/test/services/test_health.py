"""Tests for nixhealth.services.health module."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

import nixhealth.services.health as health_mod
from nixhealth.core.result import Err, Ok
from nixhealth.core.snapshot import DirenvInfo, FlakeUrl, Snapshot
from nixhealth.core.version import Version
from nixhealth.services.checkers import (
    CheckUnit,
    Direnv,
    HealthConfig,
    MaxJobs,
    Outcome,
    Verdict,
    aggregate,
    build_registry,
)
from nixhealth.services.health import (
    FLAKE_EVAL_TIMEOUT,
    UNDETERMINED_MSG,
    HealthReport,
    HealthService,
    config_from_document,
    load_health_config,
    run_checks,
)

SnapshotFactory = Callable[..., Snapshot]


class ExplodingRunner:
    """Runner whose commands fail in a way no check expects."""

    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> subprocess.CompletedProcess[str]:
        raise RuntimeError("runner crashed")


class FlakeEvalRunner:
    """Runner answering ``nix eval`` with a canned result."""

    def __init__(self, *, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[tuple[list[str], float | None]] = []

    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> subprocess.CompletedProcess[str]:
        self.calls.append((args, timeout))
        return subprocess.CompletedProcess(args, self.returncode, self.stdout, self.stderr)


class TestRunChecks:
    def test_healthy_host(self, make_snapshot: SnapshotFactory) -> None:
        snapshot = make_snapshot(trusted_users=("root", "alice"))

        outcomes = run_checks(build_registry(HealthConfig()), snapshot)

        assert [o.title for o in outcomes] == [
            "Minimum Nix Version",
            "Flakes Enabled",
            "Max Jobs",
            "Nix Caches in use",
            "Trusted Users",
            "Disk Space",
            "Direnv installed",
        ]
        assert aggregate(outcomes) == Verdict.PASS_WITH_WARNINGS

    def test_disabled_unit_contributes_nothing(self, make_snapshot: SnapshotFactory) -> None:
        config = HealthConfig(max_jobs=MaxJobs(enable=False))

        outcomes = run_checks(build_registry(config), make_snapshot(max_jobs=1))

        assert "Max Jobs" not in [o.title for o in outcomes]

    def test_unit_fault_is_isolated(
        self, make_snapshot: SnapshotFactory, tmp_path: Path
    ) -> None:
        (tmp_path / ".envrc").write_text("use flake\n", encoding="utf-8")
        direnv = Direnv(runner=ExplodingRunner(), required=True)
        config = HealthConfig(direnv=direnv)
        info = DirenvInfo(bin_path=Path("/usr/bin/direnv"), version=Version(2, 34, 0))

        outcomes = run_checks(
            build_registry(config),
            make_snapshot(direnv=info),
            FlakeUrl(str(tmp_path)),
        )

        faulted = [o for o in outcomes if o.title == Direnv.TITLE]
        assert len(faulted) == 1
        assert faulted[0].required is True
        assert faulted[0].details is not None
        assert faulted[0].details.msg == UNDETERMINED_MSG
        assert faulted[0].info == "RuntimeError: runner crashed"
        # Every other unit still reported
        assert "Minimum Nix Version" in [o.title for o in outcomes]
        assert "Disk Space" in [o.title for o in outcomes]

    def test_fault_in_middle_keeps_order(
        self, make_snapshot: SnapshotFactory, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        real_evaluate = health_mod.evaluate

        def flaky(
            unit: CheckUnit, snapshot: Snapshot, project: FlakeUrl | None
        ) -> tuple[Outcome, ...]:
            if isinstance(unit, MaxJobs):
                raise KeyError("max-jobs")
            return real_evaluate(unit, snapshot, project)

        monkeypatch.setattr(health_mod, "evaluate", flaky)

        outcomes = run_checks(build_registry(HealthConfig()), make_snapshot())

        titles = [o.title for o in outcomes]
        assert titles.index("Flakes Enabled") < titles.index("Max Jobs")
        assert titles.index("Max Jobs") < titles.index("Nix Caches in use")
        faulted = outcomes[titles.index("Max Jobs")]
        assert faulted.failed
        assert faulted.required is False


class TestHealthReport:
    def test_to_dict(self) -> None:
        report = HealthReport(
            outcomes=(
                Outcome.passing("A", "a", required=True),
                Outcome.failing("B", "b", "bad", "fix", required=True),
            )
        )

        data = report.to_dict()

        assert data["verdict"] == "hard-fail"
        assert len(report.failures) == 1
        assert data["checks"] == [o.to_dict() for o in report.outcomes]


class TestConfigFromDocument:
    def test_empty_document_is_defaults(self) -> None:
        assert config_from_document({}) == Ok(HealthConfig())

    def test_override(self) -> None:
        result = config_from_document({"nix-version": {"min-required": "2.17.0"}})

        assert isinstance(result, Ok)
        assert result.value.nix_version.min_required == Version(2, 17, 0)
        assert result.value.nix_version.required is True

    def test_invalid_value(self) -> None:
        path = Path("nix-health.toml")

        result = config_from_document({"caches": {"required-caches": ["nope"]}}, path=path)

        assert isinstance(result, Err)
        assert result.error.path == path
        assert result.error.message.startswith("Invalid health config: caches: ")

    def test_legacy_cache_list_survives_merge(self) -> None:
        result = config_from_document({"caches": {"required": ["https://foo.cachix.org"]}})

        assert isinstance(result, Ok)
        assert result.value.caches.required_caches == ("https://foo.cachix.org/",)
        assert result.value.caches.required is True


class TestLoadHealthConfig:
    def test_no_file_is_defaults(self, tmp_path: Path) -> None:
        assert load_health_config(project=FlakeUrl(str(tmp_path))) == Ok(HealthConfig())

    def test_found_in_project(self, tmp_path: Path) -> None:
        (tmp_path / "nix-health.toml").write_text(
            '[caches]\nrequired-caches = ["https://cache.nixos.org", "https://foo.cachix.org"]\n',
            encoding="utf-8",
        )

        result = load_health_config(project=FlakeUrl(str(tmp_path)))

        assert isinstance(result, Ok)
        assert result.value.caches.required_caches == (
            "https://cache.nixos.org/",
            "https://foo.cachix.org/",
        )

    def test_legacy_cache_list_in_project_json(self, tmp_path: Path) -> None:
        (tmp_path / "nix-health.json").write_text(
            '{"caches": {"required": ["https://foo.cachix.org"]}}', encoding="utf-8"
        )

        result = load_health_config(project=FlakeUrl(str(tmp_path)))

        assert isinstance(result, Ok)
        assert "https://foo.cachix.org/" in result.value.caches.required_caches

    def test_explicit_path_wins(self, tmp_path: Path) -> None:
        (tmp_path / "nix-health.toml").write_text("[max-jobs]\nenable = false\n", encoding="utf-8")
        explicit = tmp_path / "other.json"
        explicit.write_text('{"direnv": {"required": true}}', encoding="utf-8")

        result = load_health_config(explicit, FlakeUrl(str(tmp_path)))

        assert isinstance(result, Ok)
        assert result.value.direnv.required is True
        assert result.value.max_jobs.enable is True

    def test_remote_project_without_flake_attr_uses_defaults(self) -> None:
        runner = FlakeEvalRunner(
            returncode=1,
            stderr="error: flake 'github:juspay/omnix' does not provide attribute "
            "'packages.x86_64-linux.nix-health.default'",
        )

        result = load_health_config(project=FlakeUrl("github:juspay/omnix"), runner=runner)

        assert result == Ok(HealthConfig())

    def test_remote_project_flake_attr(self) -> None:
        runner = FlakeEvalRunner(
            stdout='{"caches": {"required-caches": ["https://om.cachix.org"]}}'
        )

        result = load_health_config(project=FlakeUrl("github:juspay/omnix"), runner=runner)

        assert isinstance(result, Ok)
        assert result.value.caches.required_caches == ("https://om.cachix.org/",)
        assert result.value.max_jobs == HealthConfig().max_jobs
        [(args, timeout)] = runner.calls
        assert args[-3:] == ["eval", "--json", "github:juspay/omnix#nix-health.default"]
        assert "nix-command flakes" in args
        assert timeout == FLAKE_EVAL_TIMEOUT

    def test_local_flake_attr(self, tmp_path: Path) -> None:
        (tmp_path / "flake.nix").write_text("{ outputs = _: { }; }\n", encoding="utf-8")
        runner = FlakeEvalRunner(stdout='{"direnv": {"required": true}}')

        result = load_health_config(project=FlakeUrl(f"{tmp_path}#devShells"), runner=runner)

        assert isinstance(result, Ok)
        assert result.value.direnv.required is True
        assert runner.calls[0][0][-1] == f"{tmp_path}#nix-health.default"

    def test_project_file_wins_over_flake_attr(self, tmp_path: Path) -> None:
        (tmp_path / "flake.nix").write_text("{ outputs = _: { }; }\n", encoding="utf-8")
        (tmp_path / "nix-health.toml").write_text("[max-jobs]\nenable = false\n", encoding="utf-8")
        runner = FlakeEvalRunner(stdout='{"direnv": {"required": true}}')

        result = load_health_config(project=FlakeUrl(str(tmp_path)), runner=runner)

        assert isinstance(result, Ok)
        assert result.value.max_jobs.enable is False
        assert runner.calls == []

    def test_directory_without_flake_is_not_evaluated(self, tmp_path: Path) -> None:
        runner = FlakeEvalRunner(stdout='{"direnv": {"required": true}}')

        assert load_health_config(project=FlakeUrl(str(tmp_path)), runner=runner) == Ok(
            HealthConfig()
        )
        assert runner.calls == []

    def test_flake_eval_failure(self) -> None:
        runner = FlakeEvalRunner(returncode=1, stderr="error: syntax error, unexpected '}'\n")

        result = load_health_config(project=FlakeUrl("github:juspay/omnix"), runner=runner)

        assert isinstance(result, Err)
        assert result.error.message == (
            "Unable to evaluate github:juspay/omnix#nix-health.default: "
            "error: syntax error, unexpected '}'"
        )

    def test_flake_attr_not_an_attribute_set(self) -> None:
        runner = FlakeEvalRunner(stdout="[1, 2]")

        result = load_health_config(project=FlakeUrl("github:juspay/omnix"), runner=runner)

        assert isinstance(result, Err)
        assert "must evaluate to an attribute set" in result.error.message

    def test_flake_attr_invalid_value(self) -> None:
        runner = FlakeEvalRunner(stdout='{"nix-version": {"min-required": "soon"}}')

        result = load_health_config(project=FlakeUrl("github:juspay/omnix"), runner=runner)

        assert isinstance(result, Err)
        assert "invalid version 'soon'" in result.error.message

    def test_load_error(self, tmp_path: Path) -> None:
        result = load_health_config(tmp_path / "missing.toml")
        assert isinstance(result, Err)


class TestHealthService:
    def test_run(self, make_snapshot: SnapshotFactory) -> None:
        report = HealthService(config=HealthConfig(), snapshot=make_snapshot(version="2.3.0")).run()

        assert report.verdict == Verdict.HARD_FAIL
        assert report.failures[0].title == "Minimum Nix Version"
