"""Risk attribute enumerations."""

from enum import Enum


class RiskCategory(str, Enum):
    """Business area a risk belongs to."""

    TECHNOLOGICAL = "technological"
    OPERATIONAL = "operational"
    LEGAL = "legal"


class RiskStatus(str, Enum):
    """Lifecycle status of a risk.

    ``ACCEPTED`` is only reached through an approved acceptance workflow.
    """

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    MITIGATED = "mitigated"
    ACCEPTED = "accepted"


class Severity(str, Enum):
    """Four-step scale used for both impact and probability."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class RiskLevel(str, Enum):
    """Derived severity of a risk, computed from impact and probability."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    UNDEFINED = "undefined"  # impact or probability not set yet
