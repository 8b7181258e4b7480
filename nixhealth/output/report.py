"""Rendering of a health report."""

from __future__ import annotations

import json

from nixhealth.output.console import ConsoleProtocol, Style
from nixhealth.services.checkers import Outcome, Verdict
from nixhealth.services.health import HealthReport

__all__ = ["print_outcome", "print_report", "report_json"]


def _marker(outcome: Outcome) -> tuple[str, Style]:
    if outcome.passed:
        return "✅", Style.PASS
    if outcome.required:
        return "❌", Style.FAIL
    return "🟧", Style.ADVISORY


def print_outcome(outcome: Outcome, console: ConsoleProtocol) -> None:
    marker, style = _marker(outcome)
    console.print(f"{marker} {outcome.title}", style)
    console.print(f"   {outcome.info}", Style.INFO)
    details = outcome.details
    if details is not None:
        console.print(f"   {details.msg}", Style.ADVISORY)
        console.print(f"   {details.suggestion}", Style.DIM)
    console.newline()


def print_report(report: HealthReport, console: ConsoleProtocol) -> None:
    """Print every outcome followed by the verdict line."""
    console.header("Checking the health of your Nix setup:")
    console.newline()
    for outcome in report.outcomes:
        print_outcome(outcome, console)

    match report.verdict:
        case Verdict.ALL_PASS:
            console.print("✅ All checks passed", Style.PASS)
        case Verdict.PASS_WITH_WARNINGS:
            count = len(report.failures)
            console.print(
                f"✅ Required checks passed, but {count} non-required check(s) failed",
                Style.ADVISORY,
            )
        case Verdict.HARD_FAIL:
            console.print("❌ Some required checks failed (see above)", Style.FAIL)


def report_json(report: HealthReport) -> str:
    """The report as indented JSON."""
    return json.dumps(report.to_dict(), indent=2)
