"""API routers for RiskFlow."""

from . import approvals
from . import health
from . import risks

__all__ = [
    "approvals",
    "health",
    "risks",
]
