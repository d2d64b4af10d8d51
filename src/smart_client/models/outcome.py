"""FHIR OperationOutcome models.

Servers report failures as an OperationOutcome resource carrying a list of
issues. Only the fields needed to build an error message are modelled.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class OperationOutcomeIssue(BaseModel):
    """A single issue entry of an OperationOutcome."""

    model_config = ConfigDict(extra="ignore")

    severity: str
    code: str
    diagnostics: str | None = None

    def render(self) -> str:
        parts = [self.severity, self.code]
        if self.diagnostics is not None:
            parts.append(self.diagnostics)
        return " ".join(parts)


class OperationOutcome(BaseModel):
    """FHIR OperationOutcome with at least one issue."""

    model_config = ConfigDict(extra="ignore")

    resource_type: Literal["OperationOutcome"] = Field(alias="resourceType")
    issue: list[OperationOutcomeIssue] = Field(min_length=1)

    def to_message(self) -> str:
        """Render all issues, one per line."""
        return "\n".join(issue.render() for issue in self.issue)


def parse_operation_outcome(body: Any) -> OperationOutcome | None:
    """Parse a response body as an OperationOutcome.

    Returns:
        The parsed outcome, or None if the body has a different shape
        (including an OperationOutcome without issues)
    """
    if not isinstance(body, dict):
        return None
    try:
        return OperationOutcome.model_validate(body)
    except ValidationError:
        return None
