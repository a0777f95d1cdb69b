"""
Reference validation results.

Airport, runway and region records point at each other only by code and
nothing enforces those references at load time. These classes describe the
outcome of the optional post-load check run by AptDB.validate_references().
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class ReferenceIssue:
    """A record pointing at a code that was not loaded."""

    kind: str  # entity kind of the referring record, e.g. 'runway'
    key: str  # key of the referring record
    field: str  # name of the reference field
    value: str  # the dangling code

    def __str__(self) -> str:
        return f"{self.kind} {self.key}: {self.field} '{self.value}' not found"


@dataclass
class ValidationResult:
    """Result of a reference validation pass."""

    issues: List[ReferenceIssue] = field(default_factory=list)
    checked: int = 0

    @property
    def is_valid(self) -> bool:
        """Check if validation passed (no dangling references)."""
        return len(self.issues) == 0

    def add_issue(self, kind: str, key: str, field: str, value: str) -> None:
        """Record a dangling reference."""
        self.issues.append(ReferenceIssue(kind, key, field, value))

    def issues_for(self, kind: str) -> List[ReferenceIssue]:
        """Get the issues raised by records of one entity kind."""
        return [issue for issue in self.issues if issue.kind == kind]

    def __str__(self) -> str:
        if self.is_valid:
            return f"Valid ({self.checked} records checked)"
        return f"Invalid ({len(self.issues)} dangling references in {self.checked} records)"

    def get_issue_messages(self) -> List[str]:
        """Get all issue messages as strings."""
        return [str(issue) for issue in self.issues]
