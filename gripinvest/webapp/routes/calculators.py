"""Public bond and ETF calculator endpoints."""

from flask import Blueprint

from gripinvest.calculators import LUMPSUM, SIP, calculate_bond, calculate_lumpsum, calculate_sip
from gripinvest.models import ValidationResult
from gripinvest.validators import validate_range
from gripinvest.webapp.errors import ApiError
from gripinvest.webapp.routes import ensure_valid, json_body, success

calculators_bp = Blueprint('calculators', __name__)

# (min, max) accepted by the calculator forms
BOND_AMOUNT = (10000, 1000000)
BOND_COUPON = (6, 15)
BOND_YEARS = (1, 10)
SIP_MONTHLY = (500, 50000)
LUMPSUM_AMOUNT = (10000, 1000000)
ETF_RATE = (8, 20)
ETF_YEARS = (1, 20)


@calculators_bp.route('/bond', methods=['POST'])
def bond():
    """Project bond coupon returns."""
    data = json_body()
    result = ValidationResult()
    amount = validate_range(result, data, 'amount', *BOND_AMOUNT, 'Investment amount')
    coupon = validate_range(result, data, 'couponRate', *BOND_COUPON, 'Coupon rate')
    years = validate_range(result, data, 'years', *BOND_YEARS, 'Tenure')
    ensure_valid(result)

    projection = calculate_bond(amount, coupon, int(years))
    return success({'projection': projection.to_dict()})


@calculators_bp.route('/etf', methods=['POST'])
def etf():
    """Project ETF growth for a SIP or a lumpsum."""
    data = json_body()
    mode = data.get('mode') or SIP
    if mode not in (SIP, LUMPSUM):
        raise ApiError('Mode must be sip or lumpsum', 400)

    result = ValidationResult()
    if mode == SIP:
        amount = validate_range(result, data, 'amount', *SIP_MONTHLY, 'Monthly investment')
    else:
        amount = validate_range(result, data, 'amount', *LUMPSUM_AMOUNT, 'Investment amount')
    rate = validate_range(result, data, 'rate', *ETF_RATE, 'Expected return')
    years = validate_range(result, data, 'years', *ETF_YEARS, 'Tenure')
    ensure_valid(result)

    if mode == SIP:
        projection = calculate_sip(amount, rate, int(years))
    else:
        projection = calculate_lumpsum(amount, rate, int(years))
    return success({'projection': projection.to_dict()})
