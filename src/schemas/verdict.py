"""Validation verdict schemas.

A verdict is data, not an exception: the validator always returns one, and
it is up to the caller (normally the pipeline's validation phase) to decide
that a failing verdict stops the pipeline.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, computed_field

Severity = Literal["critical", "error", "warning"]
Impact = Literal["high", "medium", "low"]

SEVERITY_PENALTIES = {"critical": 20, "error": 10}
IMPACT_PENALTIES = {"high": 5, "medium": 3, "low": 1}


class Diagnostic(BaseModel):
    """A single rule violation.

    Attributes:
        code: Stable machine-readable code (e.g. "EPUB_TOO_LARGE")
        message: Human-readable description
        severity: "critical", "error" or "warning"
        impact: Impact of a warning ("high", "medium", "low"); ignored otherwise
        suggestion: How to fix the problem
    """

    code: str
    message: str
    severity: Severity
    impact: Impact = "medium"
    suggestion: str = ""

    model_config = {"frozen": True}


def score_diagnostics(diagnostics: list[Diagnostic]) -> int:
    """Score a list of diagnostics on a 0-100 scale.

    Starts at 100 and subtracts 20 per critical, 10 per error and 5/3/1 per
    high/medium/low impact warning, never going below 0.
    """
    score = 100
    for diagnostic in diagnostics:
        if diagnostic.severity == "warning":
            score -= IMPACT_PENALTIES[diagnostic.impact]
        else:
            score -= SEVERITY_PENALTIES[diagnostic.severity]
    return max(0, score)


class ValidationVerdict(BaseModel):
    """The outcome of validating one artifact for one destination.

    Attributes:
        destination: Destination the artifact was checked against
        artifact_kind: Kind of artifact checked ("ebook", "print", "cover")
        diagnostics: Rule violations in the order they were found
        validated_at: When the verdict was produced
    """

    destination: str
    artifact_kind: str
    diagnostics: list[Diagnostic] = []
    validated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field
    @property
    def quality_score(self) -> int:
        return score_diagnostics(self.diagnostics)

    @computed_field
    @property
    def valid(self) -> bool:
        return not self.critical

    @property
    def critical(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "critical"]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "error"]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "warning"]

    def summary(self) -> str:
        """One-line summary for logs and error messages."""
        status = "passed" if self.valid else "failed"
        codes = ", ".join(d.code for d in self.critical) or "no critical issues"
        return (
            f"{self.artifact_kind} for {self.destination} {status} "
            f"(score {self.quality_score}; {codes})"
        )
