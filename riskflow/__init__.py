"""RiskFlow: risk acceptance approval service."""

__version__ = "0.3.0"
