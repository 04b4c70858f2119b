"""Risk domain: attribute enumerations and level classification."""

from .enums import RiskCategory, RiskStatus, Severity, RiskLevel
from .levels import (
    RISK_MATRIX,
    RiskLevelClassifier,
    calculate_risk_level,
    parse_severity,
)

__all__ = [
    "RiskCategory",
    "RiskStatus",
    "Severity",
    "RiskLevel",
    "RISK_MATRIX",
    "RiskLevelClassifier",
    "calculate_risk_level",
    "parse_severity",
]
