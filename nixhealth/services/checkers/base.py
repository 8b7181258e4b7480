# SPDX-License-Identifier: MIT
"""Outcome and verdict types shared by all check units."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto

__all__ = [
    "Failed",
    "Outcome",
    "Passed",
    "Verdict",
    "aggregate",
]


@dataclass(frozen=True, slots=True)
class Passed:
    """The checked aspect is healthy."""


@dataclass(frozen=True, slots=True)
class Failed:
    """The checked aspect is unhealthy.

    Attributes:
        msg: Short description of the problem
        suggestion: How the user can fix it
    """

    msg: str
    suggestion: str


CheckResult = Passed | Failed


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of evaluating one aspect of one check unit.

    Attributes:
        title: Human-facing name of what was checked (e.g. "Nix Caches in use")
        info: Observed context, usually the relevant config value
        result: Passed, or Failed with message and suggestion
        required: Copied from the unit; a required failure fails the run
    """

    title: str
    info: str
    result: CheckResult
    required: bool = True

    @property
    def passed(self) -> bool:
        return isinstance(self.result, Passed)

    @property
    def failed(self) -> bool:
        return isinstance(self.result, Failed)

    @property
    def details(self) -> Failed | None:
        """The failure details, or None if the outcome passed."""
        if isinstance(self.result, Failed):
            return self.result
        return None

    @classmethod
    def passing(cls, title: str, info: str, *, required: bool) -> Outcome:
        """Create a passing outcome."""
        return cls(title=title, info=info, result=Passed(), required=required)

    @classmethod
    def failing(
        cls, title: str, info: str, msg: str, suggestion: str, *, required: bool
    ) -> Outcome:
        """Create a failing outcome."""
        return cls(
            title=title,
            info=info,
            result=Failed(msg=msg, suggestion=suggestion),
            required=required,
        )

    def to_dict(self) -> dict[str, object]:
        """Plain representation for JSON output."""
        out: dict[str, object] = {
            "title": self.title,
            "info": self.info,
            "passed": self.passed,
            "required": self.required,
        }
        if isinstance(self.result, Failed):
            out["msg"] = self.result.msg
            out["suggestion"] = self.result.suggestion
        return out


class Verdict(Enum):
    """Aggregate result of a health run."""

    ALL_PASS = auto()
    PASS_WITH_WARNINGS = auto()
    """Only non-required checks failed."""
    HARD_FAIL = auto()
    """At least one required check failed."""

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")

    @property
    def exit_code(self) -> int:
        """Process exit status: advisory failures do not fail the process."""
        return 1 if self == Verdict.HARD_FAIL else 0


def aggregate(outcomes: Iterable[Outcome]) -> Verdict:
    """Fold outcomes into a verdict.

    HARD_FAIL is terminal; PASS_WITH_WARNINGS never overrides it. The fold
    only ever moves towards the worse verdict, so the outcome order does not
    affect the result.
    """
    verdict = Verdict.ALL_PASS
    for outcome in outcomes:
        if outcome.passed:
            continue
        if outcome.required:
            return Verdict.HARD_FAIL
        verdict = Verdict.PASS_WITH_WARNINGS
    return verdict
