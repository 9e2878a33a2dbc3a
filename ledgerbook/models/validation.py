"""
Validation Models

User input that breaks a rule is never raised as an exception.
Services return one of these result objects instead, and the caller
decides how to surface the issues.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'duplicate', 'not_found')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


def has_blocking_issues(issues: list[ValidationIssue]) -> bool:
    """True when any issue in the list is error-level."""
    return any(issue.severity == "error" for issue in issues)


class ActionResult(BaseModel):
    """
    Outcome of a user action that may be rejected by validation.

    ``success`` is False exactly when at least one error-level issue
    was found; in that case nothing was written to storage.
    """

    success: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return has_blocking_issues(self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]
