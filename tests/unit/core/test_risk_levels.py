"""Tests for risk level classification."""

import itertools

import pytest

from riskflow.core.risk import (
    RISK_MATRIX,
    RiskLevel,
    RiskLevelClassifier,
    Severity,
    calculate_risk_level,
    parse_severity,
)

LEVEL_ORDER = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]
SEVERITIES = list(Severity)


class TestRiskMatrix:
    """Structural properties of the classification matrix."""

    def test_total_over_all_inputs(self):
        """Every (impact, probability) pair maps to a defined level."""
        for impact, probability in itertools.product(SEVERITIES, SEVERITIES):
            level = calculate_risk_level(impact, probability)
            assert level in LEVEL_ORDER

    def test_monotonic_in_impact(self):
        for probability in SEVERITIES:
            levels = [LEVEL_ORDER.index(calculate_risk_level(i, probability)) for i in SEVERITIES]
            assert levels == sorted(levels)

    def test_monotonic_in_probability(self):
        for impact in SEVERITIES:
            levels = [LEVEL_ORDER.index(calculate_risk_level(impact, p)) for p in SEVERITIES]
            assert levels == sorted(levels)

    def test_matrix_shape(self):
        assert len(RISK_MATRIX) == 4
        assert all(len(row) == 4 for row in RISK_MATRIX)

    def test_extremes(self):
        assert calculate_risk_level(Severity.LOW, Severity.LOW) == RiskLevel.LOW
        assert calculate_risk_level(Severity.CRITICAL, Severity.CRITICAL) == RiskLevel.CRITICAL

    @pytest.mark.parametrize("impact,probability,expected", [
        ("high", "low", RiskLevel.MEDIUM),
        ("critical", "low", RiskLevel.HIGH),
        ("low", "critical", RiskLevel.MEDIUM),
        ("high", "medium", RiskLevel.HIGH),
        ("high", "high", RiskLevel.HIGH),
        ("critical", "high", RiskLevel.CRITICAL),
        ("high", "critical", RiskLevel.CRITICAL),
        ("medium", "medium", RiskLevel.MEDIUM),
    ])
    def test_known_cells(self, impact, probability, expected):
        assert calculate_risk_level(impact, probability) == expected


class TestSeverityParsing:
    """Input coercion for impact and probability."""

    def test_enum_and_value(self):
        assert parse_severity(Severity.HIGH) == Severity.HIGH
        assert parse_severity("high") == Severity.HIGH
        assert parse_severity(" HIGH ") == Severity.HIGH

    def test_legacy_labels(self):
        assert parse_severity("Baixo") == Severity.LOW
        assert parse_severity("Médio") == Severity.MEDIUM
        assert parse_severity("Alto") == Severity.HIGH
        assert parse_severity("Crítico") == Severity.CRITICAL

    def test_missing_values(self):
        assert parse_severity(None) is None
        assert parse_severity("") is None

    def test_unknown_value(self):
        with pytest.raises(ValueError):
            parse_severity("catastrophic")

    def test_missing_input_is_undefined(self):
        assert calculate_risk_level(None, "high") == RiskLevel.UNDEFINED
        assert calculate_risk_level("high", None) == RiskLevel.UNDEFINED


class TestRiskLevelClassifier:

    def test_classify_matches_function(self):
        classifier = RiskLevelClassifier()
        for impact, probability in itertools.product(SEVERITIES, SEVERITIES):
            assert classifier.classify(impact, probability) == calculate_risk_level(impact, probability)

    def test_callable(self):
        classifier = RiskLevelClassifier()
        assert classifier("critical", "critical") == RiskLevel.CRITICAL
