"""
Investment return calculators.

Pure functions behind the product pages and the bond/ETF calculator
endpoints:

- simple interest returns and maturity value of a product investment
- coupon bond projection held to maturity
- SIP (annuity due, monthly compounding) and lumpsum (annual compounding)
  growth projections with year by year schedules
"""

import logging
import math

from gripinvest.models import BondProjection, GrowthProjection

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12
BOND_FACE_VALUE = 1000

SIP = 'sip'
LUMPSUM = 'lumpsum'


def _round2(value: float) -> float:
    return round(value + 0.0, 2)


def calculate_returns(amount: float, annual_yield: float, tenure_months: int) -> float:
    """Simple interest earned on amount over tenure_months."""
    years = tenure_months / MONTHS_PER_YEAR
    return amount * (annual_yield / 100) * years


def calculate_maturity_value(amount: float, annual_yield: float, tenure_months: int) -> float:
    """Principal plus simple interest, rounded to paise."""
    return _round2(amount + calculate_returns(amount, annual_yield, tenure_months))


def absolute_return_pct(gains: float, invested: float) -> float:
    if not invested:
        return 0.0
    return _round2(gains / invested * 100)


def calculate_bond(amount: float, coupon_rate: float, tenure_years: int,
                   face_value: float = BOND_FACE_VALUE) -> BondProjection:
    """
    Project a coupon bond purchase held to maturity.

    Only whole bonds earn coupon; any remainder of amount is returned
    at maturity with the principal.

    Args:
        amount: Amount invested (must be positive)
        coupon_rate: Annual coupon in percent
        tenure_years: Whole years held (must be positive)
        face_value: Face value of a single bond

    Returns:
        BondProjection with totals and a yearly schedule.

    Raises:
        ValueError: On non-positive amount, tenure or face value.
    """
    if amount <= 0:
        raise ValueError("Amount must be greater than zero")
    if tenure_years <= 0:
        raise ValueError("Tenure must be at least one year")
    if face_value <= 0:
        raise ValueError("Face value must be greater than zero")

    number_of_bonds = int(math.floor(amount / face_value))
    annual_coupon = number_of_bonds * face_value * (coupon_rate / 100)
    total_coupon = annual_coupon * tenure_years
    total_returns = amount + total_coupon
    effective_yield = _round2((total_returns - amount) / amount / tenure_years * 100)

    schedule = [
        {'year': year, 'amount': _round2(amount + annual_coupon * year)}
        for year in range(tenure_years + 1)
    ]

    logger.debug(f"Bond projection: {number_of_bonds} bonds, yield {effective_yield}%")
    return BondProjection(
        amount=amount,
        coupon_rate=coupon_rate,
        tenure_years=tenure_years,
        face_value=face_value,
        number_of_bonds=number_of_bonds,
        annual_coupon=_round2(annual_coupon),
        total_coupon=_round2(total_coupon),
        total_returns=_round2(total_returns),
        effective_yield=effective_yield,
        schedule=schedule,
    )


def sip_future_value(monthly_amount: float, annual_rate: float, months: int) -> float:
    """Future value of a monthly SIP paid at the start of each month."""
    if months <= 0:
        return 0.0
    monthly_rate = annual_rate / MONTHS_PER_YEAR / 100
    if monthly_rate == 0:
        return monthly_amount * months
    growth = (1 + monthly_rate) ** months
    return monthly_amount * ((growth - 1) / monthly_rate) * (1 + monthly_rate)


def lumpsum_future_value(amount: float, annual_rate: float, years: float) -> float:
    """Future value of a one-time investment compounded yearly."""
    return amount * (1 + annual_rate / 100) ** years


def calculate_sip(monthly_amount: float, annual_rate: float, years: int) -> GrowthProjection:
    """
    Project a monthly SIP over whole years.

    Raises:
        ValueError: On non-positive monthly amount or years, or negative rate.
    """
    if monthly_amount <= 0:
        raise ValueError("Monthly amount must be greater than zero")
    if years <= 0:
        raise ValueError("Years must be at least one")
    if annual_rate < 0:
        raise ValueError("Return rate cannot be negative")

    total_months = years * MONTHS_PER_YEAR
    maturity_value = _round2(sip_future_value(monthly_amount, annual_rate, total_months))
    total_investment = monthly_amount * total_months
    capital_gains = _round2(maturity_value - total_investment)

    schedule = []
    for year in range(years + 1):
        months = year * MONTHS_PER_YEAR
        schedule.append({
            'year': year,
            'invested': monthly_amount * months,
            'value': _round2(sip_future_value(monthly_amount, annual_rate, months)),
        })

    return GrowthProjection(
        mode=SIP,
        total_investment=total_investment,
        maturity_value=maturity_value,
        capital_gains=capital_gains,
        absolute_return=absolute_return_pct(capital_gains, total_investment),
        schedule=schedule,
    )


def calculate_lumpsum(amount: float, annual_rate: float, years: int) -> GrowthProjection:
    """
    Project a one-time investment over whole years.

    Raises:
        ValueError: On non-positive amount or years, or negative rate.
    """
    if amount <= 0:
        raise ValueError("Amount must be greater than zero")
    if years <= 0:
        raise ValueError("Years must be at least one")
    if annual_rate < 0:
        raise ValueError("Return rate cannot be negative")

    maturity_value = _round2(lumpsum_future_value(amount, annual_rate, years))
    capital_gains = _round2(maturity_value - amount)

    schedule = [
        {
            'year': year,
            'invested': amount,
            'value': _round2(lumpsum_future_value(amount, annual_rate, year)),
        }
        for year in range(years + 1)
    ]

    return GrowthProjection(
        mode=LUMPSUM,
        total_investment=amount,
        maturity_value=maturity_value,
        capital_gains=capital_gains,
        absolute_return=absolute_return_pct(capital_gains, amount),
        schedule=schedule,
    )
