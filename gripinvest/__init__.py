"""
Grip Invest platform backend.

REST API for browsing investment products, investing from a virtual
balance and tracking a portfolio, plus the return calculators and
formatting helpers the frontend shares.
"""

from gripinvest.calculators import (
    calculate_bond,
    calculate_lumpsum,
    calculate_maturity_value,
    calculate_returns,
    calculate_sip,
)
from gripinvest.models import (
    BondProjection,
    GrowthProjection,
    InvestmentType,
    PasswordStrength,
    RiskLevel,
    ValidationResult,
)

__version__ = "1.0.0"
__all__ = [
    "BondProjection",
    "GrowthProjection",
    "InvestmentType",
    "PasswordStrength",
    "RiskLevel",
    "ValidationResult",
    "calculate_bond",
    "calculate_lumpsum",
    "calculate_maturity_value",
    "calculate_returns",
    "calculate_sip",
]
