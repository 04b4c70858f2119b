"""Risk level classification.

The level is read from a 4x4 severity matrix indexed by probability (rows)
and impact (columns):

                      impact
    probability   low     medium  high      critical
    low           low     low     medium    high
    medium        low     medium  high      high
    high          medium  high    high      critical
    critical      medium  high    critical  critical

Every row and every column is non-decreasing, so raising either input never
lowers the resulting level.
"""

from typing import Dict, Optional, Tuple, Union

from .enums import RiskLevel, Severity


SeverityInput = Union[Severity, str, None]

_L, _M, _H, _C = RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL

# Rows: probability, columns: impact (both ordered low -> critical)
RISK_MATRIX: Tuple[Tuple[RiskLevel, ...], ...] = (
    (_L, _L, _M, _H),
    (_L, _M, _H, _H),
    (_M, _H, _H, _C),
    (_M, _H, _C, _C),
)

# Labels used by spreadsheets exported from the legacy (Portuguese) UI
LEGACY_SEVERITY_LABELS: Dict[str, Severity] = {
    "baixo": Severity.LOW,
    "baixa": Severity.LOW,
    "médio": Severity.MEDIUM,
    "medio": Severity.MEDIUM,
    "média": Severity.MEDIUM,
    "media": Severity.MEDIUM,
    "alto": Severity.HIGH,
    "alta": Severity.HIGH,
    "crítico": Severity.CRITICAL,
    "critico": Severity.CRITICAL,
    "crítica": Severity.CRITICAL,
    "critica": Severity.CRITICAL,
}


def parse_severity(value: SeverityInput) -> Optional[Severity]:
    """Coerce an enum member, its value, or a legacy label to a Severity.

    Returns None for missing values.

    Raises:
        ValueError: If the value is not a known severity
    """
    if value is None or value == "":
        return None
    if isinstance(value, Severity):
        return value

    normalized = str(value).strip().lower()
    if normalized in LEGACY_SEVERITY_LABELS:
        return LEGACY_SEVERITY_LABELS[normalized]
    return Severity(normalized)


def calculate_risk_level(impact: SeverityInput, probability: SeverityInput) -> RiskLevel:
    """Map (impact, probability) to a risk level using RISK_MATRIX.

    Returns RiskLevel.UNDEFINED when either input is missing.
    """
    impact_sev = parse_severity(impact)
    probability_sev = parse_severity(probability)
    if impact_sev is None or probability_sev is None:
        return RiskLevel.UNDEFINED
    return RISK_MATRIX[probability_sev.rank - 1][impact_sev.rank - 1]


class RiskLevelClassifier:
    """Stateless classifier object, for callers that want an injectable collaborator."""

    matrix = RISK_MATRIX

    def classify(self, impact: SeverityInput, probability: SeverityInput) -> RiskLevel:
        return calculate_risk_level(impact, probability)

    __call__ = classify
