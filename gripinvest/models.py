"""
Data models for the Grip Invest platform.

This module defines the core value types using enums and dataclasses for:
- Product, risk and investment status vocabularies
- Password strength analysis
- Calculator results (bond, SIP, lumpsum)
- Validation results
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class InvestmentType(Enum):
    """Kinds of investment products offered on the platform."""
    BOND = "bond"
    FIXED_DEPOSIT = "fixed_deposit"
    MUTUAL_FUND = "mutual_fund"
    ETF = "etf"
    OTHER = "other"


class RiskLevel(Enum):
    """Risk level of a product, also used as a user's risk appetite."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class InvestmentStatus(Enum):
    """Lifecycle of a single investment."""
    ACTIVE = "active"
    MATURED = "matured"
    CANCELLED = "cancelled"


class LedgerType(Enum):
    """Direction of a balance movement."""
    DEBIT = "debit"
    CREDIT = "credit"


class LedgerCategory(Enum):
    """Why a balance movement happened."""
    INVESTMENT = "investment"
    REFUND = "refund"
    MATURITY = "maturity"
    SIGNUP_BONUS = "signup_bonus"


class OtpPurpose(Enum):
    """Flows that issue a one-time password."""
    SIGNUP = "signup"
    LOGIN = "login"
    PASSWORD_RESET = "password_reset"


INVESTMENT_TYPES = [t.value for t in InvestmentType if t is not InvestmentType.OTHER]
RISK_LEVELS = [r.value for r in RiskLevel]


@dataclass
class PasswordStrength:
    """
    Result of a password strength check.

    Attributes:
        score: 0-100 points accumulated from the individual checks
        level: 'weak', 'moderate' or 'strong'
        feedback: Suggestions for improving the password
        is_strong: True when the score reaches the strong threshold
    """
    score: int = 0
    level: str = "weak"
    feedback: List[str] = field(default_factory=list)
    is_strong: bool = False

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "level": self.level,
            "feedback": list(self.feedback),
            "isStrong": self.is_strong,
        }


@dataclass
class BondProjection:
    """
    Projected returns for a coupon bond held to maturity.

    Attributes:
        amount: Amount invested
        coupon_rate: Annual coupon rate in percent
        tenure_years: Holding period in years
        face_value: Face value of one bond
        number_of_bonds: Whole bonds the amount buys
        annual_coupon: Coupon paid per year across all bonds
        total_coupon: Coupon paid over the full tenure
        total_returns: Principal plus all coupons
        effective_yield: Simple annualised yield in percent
        schedule: Year by year cumulative value
    """
    amount: float
    coupon_rate: float
    tenure_years: int
    face_value: float
    number_of_bonds: int
    annual_coupon: float
    total_coupon: float
    total_returns: float
    effective_yield: float
    schedule: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "couponRate": self.coupon_rate,
            "tenureYears": self.tenure_years,
            "faceValue": self.face_value,
            "numberOfBonds": self.number_of_bonds,
            "annualCouponPayment": self.annual_coupon,
            "totalCouponPayments": self.total_coupon,
            "principalAtMaturity": self.amount,
            "totalReturns": self.total_returns,
            "effectiveYield": self.effective_yield,
            "schedule": self.schedule,
        }


@dataclass
class GrowthProjection:
    """
    Projected growth of a SIP or lumpsum investment.

    Attributes:
        mode: 'sip' or 'lumpsum'
        total_investment: Money put in over the period
        maturity_value: Value at the end of the period
        capital_gains: maturity_value - total_investment
        absolute_return: Gains as a percentage of the investment
        schedule: Year by year invested amount and value
    """
    mode: str
    total_investment: float
    maturity_value: float
    capital_gains: float
    absolute_return: float
    schedule: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "totalInvestment": self.total_investment,
            "maturityValue": self.maturity_value,
            "capitalGains": self.capital_gains,
            "absoluteReturn": self.absolute_return,
            "schedule": self.schedule,
        }


@dataclass
class ValidationResult:
    """
    Result of request validation checks.

    Attributes:
        is_valid: True if no rule failed
        errors: One {'field', 'message'} entry per failed rule
    """
    is_valid: bool = True
    errors: List[dict] = field(default_factory=list)

    def add_error(self, field_name: Optional[str], message: str) -> None:
        """Record a failed rule and mark the result as invalid."""
        self.errors.append({"field": field_name, "message": message})
        self.is_valid = False

    def merge(self, other: "ValidationResult") -> None:
        """Merge another validation result into this one."""
        self.errors.extend(other.errors)
        if not other.is_valid:
            self.is_valid = False

    @property
    def first_message(self) -> Optional[str]:
        return self.errors[0]["message"] if self.errors else None
