"""
Request validation rules for the Grip Invest API.

Each validate_* function takes the decoded JSON body and returns a
ValidationResult listing every failed rule, so the API can report all
problems in one response.
"""

import logging
import re
from typing import Optional

from gripinvest.helpers import is_valid_email
from gripinvest.models import (
    INVESTMENT_TYPES,
    RISK_LEVELS,
    PasswordStrength,
    ValidationResult,
)
from gripinvest.otp import OTP_PATTERN

logger = logging.getLogger(__name__)

SPECIAL_CHARS = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

STRONG_THRESHOLD = 80
MODERATE_THRESHOLD = 60

MIN_TENURE_MONTHS = 1
MAX_TENURE_MONTHS = 360
MAX_YIELD = 100
DEFAULT_MIN_INVESTMENT = 1000

PROFILE_FIELDS = ['first_name', 'last_name', 'risk_appetite']


def normalize_email(email: Optional[str]) -> str:
    return (email or '').strip().lower()


def check_password_strength(password: Optional[str]) -> PasswordStrength:
    """
    Score a password from 0 to 100 and suggest improvements.

    Points: length >= 8 (25), uppercase (25), lowercase (25),
    digit (15), special character (10).
    """
    if not password or not isinstance(password, str):
        return PasswordStrength(score=0, level='weak', feedback=['Password is required'])

    strength = PasswordStrength()

    if len(password) >= 8:
        strength.score += 25
    else:
        strength.feedback.append('Password should be at least 8 characters long')

    if re.search(r"[A-Z]", password):
        strength.score += 25
    else:
        strength.feedback.append('Add uppercase letters (A-Z)')

    if re.search(r"[a-z]", password):
        strength.score += 25
    else:
        strength.feedback.append('Add lowercase letters (a-z)')

    if re.search(r"[0-9]", password):
        strength.score += 15
    else:
        strength.feedback.append('Add numbers (0-9)')

    if SPECIAL_CHARS.search(password):
        strength.score += 10
    else:
        strength.feedback.append('Add special characters (!@#$%^&*)')

    if strength.score >= STRONG_THRESHOLD:
        strength.level = 'strong'
        strength.is_strong = True
        strength.feedback = ['Great! Your password is strong']
    elif strength.score >= MODERATE_THRESHOLD:
        strength.level = 'moderate'
    else:
        strength.level = 'weak'

    logger.debug(f"Password strength: {strength.level} ({strength.score}/100)")
    return strength


def _validate_password_rules(password, field_name: str, label: str) -> ValidationResult:
    result = ValidationResult()
    if not password:
        result.add_error(field_name, f'{label} is required')
        return result
    if not isinstance(password, str):
        result.add_error(field_name, f'{label} must be a string')
        return result
    if len(password) < 8:
        result.add_error(field_name, 'Password must be at least 8 characters long')
    if not re.search(r"[A-Z]", password):
        result.add_error(field_name, 'Password must contain at least one uppercase letter')
    if not re.search(r"[a-z]", password):
        result.add_error(field_name, 'Password must contain at least one lowercase letter')
    if not re.search(r"[0-9]", password):
        result.add_error(field_name, 'Password must contain at least one number')
    if not SPECIAL_CHARS.search(password):
        result.add_error(field_name, 'Password must contain at least one special character')
    return result


def _validate_email(email) -> ValidationResult:
    result = ValidationResult()
    email = normalize_email(email if isinstance(email, str) else None)
    if not email:
        result.add_error('email', 'Email is required')
    elif not is_valid_email(email):
        result.add_error('email', 'Invalid email format')
    return result


def _validate_risk(value, field_name: str = 'risk_appetite') -> ValidationResult:
    result = ValidationResult()
    if value is not None and value not in RISK_LEVELS:
        result.add_error(field_name, 'Risk appetite must be low, moderate, or high')
    return result


def _check_first_name(result: ValidationResult, value, required: bool) -> None:
    if value is None or (required and value == ''):
        if required:
            result.add_error('first_name', 'First name is required')
        return
    if not isinstance(value, str):
        result.add_error('first_name', 'First name must be a string')
        return
    first_name = value.strip()
    if not first_name and required:
        result.add_error('first_name', 'First name is required')
    elif not (2 <= len(first_name) <= 100):
        result.add_error('first_name', 'First name must be at least 2 characters')


def _check_last_name(result: ValidationResult, value) -> None:
    if value is None:
        return
    if not isinstance(value, str):
        result.add_error('last_name', 'Last name must be a string')
    elif len(value.strip()) > 100:
        result.add_error('last_name', 'Last name must be less than 100 characters')


def validate_signup(data: dict) -> ValidationResult:
    result = ValidationResult()
    _check_first_name(result, data.get('first_name'), required=True)
    _check_last_name(result, data.get('last_name'))

    result.merge(_validate_email(data.get('email')))
    result.merge(_validate_password_rules(data.get('password'), 'password', 'Password'))
    result.merge(_validate_risk(data.get('risk_appetite')))
    return result


def validate_login(data: dict) -> ValidationResult:
    result = _validate_email(data.get('email'))
    password = data.get('password')
    if not password:
        result.add_error('password', 'Password is required')
    elif not isinstance(password, str):
        result.add_error('password', 'Password must be a string')
    return result


def validate_reset_request(data: dict) -> ValidationResult:
    return _validate_email(data.get('email'))


def validate_otp_body(data: dict) -> ValidationResult:
    result = _validate_email(data.get('email'))
    otp = data.get('otp')
    if otp is None or otp == '':
        result.add_error('otp', 'OTP is required')
    elif not OTP_PATTERN.match(str(otp)):
        result.add_error('otp', 'OTP must be exactly 6 numeric digits')
    return result


def validate_reset_password(data: dict) -> ValidationResult:
    result = validate_otp_body(data)
    result.merge(_validate_password_rules(data.get('newPassword'), 'newPassword', 'New password'))
    return result


def validate_profile_update(data: dict) -> ValidationResult:
    result = ValidationResult()
    _check_first_name(result, data.get('first_name'), required=False)
    _check_last_name(result, data.get('last_name'))
    result.merge(_validate_risk(data.get('risk_appetite')))
    return result


def _is_number(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


def validate_investment(data: dict) -> ValidationResult:
    result = ValidationResult()
    product_id = data.get('product_id')
    if product_id is None or product_id == '':
        result.add_error('product_id', 'Product ID is required')
    elif not isinstance(product_id, str):
        result.add_error('product_id', 'Product ID must be a valid identifier')

    amount = data.get('amount')
    if amount is None or amount == '':
        result.add_error('amount', 'Amount is required')
    elif not _is_number(amount) or float(amount) < 1:
        result.add_error('amount', 'Amount must be at least 1')
    return result


def validate_product(data: dict, partial: bool = False,
                     current: Optional[dict] = None) -> ValidationResult:
    """
    Validate product fields for create (all required) or update (partial).

    Only keys present in data are range-checked when partial is True.
    The min/max pair is checked against current (the stored product) for
    whichever side data leaves out; on create a missing minimum means
    DEFAULT_MIN_INVESTMENT.
    """
    result = ValidationResult()

    if not partial:
        required = ['name', 'investment_type', 'tenure_months', 'annual_yield', 'risk_level']
        if any(data.get(f) in (None, '') for f in required):
            result.add_error(
                None,
                'Name, investment_type, tenure_months, annual_yield, and risk_level are required'
            )
            return result

    if 'name' in data:
        if not isinstance(data['name'], str):
            result.add_error('name', 'Name must be a string')
        elif not data['name'].strip():
            result.add_error('name', 'Name cannot be empty')

    description = data.get('description')
    if description is not None and not isinstance(description, str):
        result.add_error('description', 'Description must be a string')

    if 'investment_type' in data and data['investment_type'] not in INVESTMENT_TYPES:
        result.add_error(
            'investment_type',
            'Invalid investment_type. Must be bond, fixed_deposit, mutual_fund, or etf'
        )

    if 'risk_level' in data and data['risk_level'] not in RISK_LEVELS:
        result.add_error('risk_level', 'Invalid risk_level. Must be low, moderate, or high')

    if 'tenure_months' in data:
        tenure = data['tenure_months']
        if not _is_number(tenure) or not (MIN_TENURE_MONTHS <= float(tenure) <= MAX_TENURE_MONTHS) \
                or float(tenure) != int(float(tenure)):
            result.add_error('tenure_months', 'Tenure must be between 1 and 360 months')

    if 'annual_yield' in data:
        annual_yield = data['annual_yield']
        if not _is_number(annual_yield) or not (0 <= float(annual_yield) <= MAX_YIELD):
            result.add_error('annual_yield', 'Annual yield must be between 0 and 100')

    if current is None:
        current = {} if partial else {'min_investment': DEFAULT_MIN_INVESTMENT}

    min_inv = data.get('min_investment')
    if min_inv is not None and (not _is_number(min_inv) or float(min_inv) <= 0):
        result.add_error('min_investment', 'Minimum investment must be a positive number')

    max_inv = data.get('max_investment')
    if max_inv is not None and (not _is_number(max_inv) or float(max_inv) <= 0):
        result.add_error('max_investment', 'Maximum investment must be a positive number')

    if result.is_valid:
        lower = min_inv if 'min_investment' in data else current.get('min_investment')
        upper = max_inv if 'max_investment' in data else current.get('max_investment')
        if lower is not None and upper is not None and float(upper) < float(lower):
            if 'max_investment' in data:
                result.add_error('max_investment', 'Maximum investment cannot be below the minimum')
            else:
                result.add_error('min_investment', 'Minimum investment cannot exceed the maximum')

    return result


def validate_range(result: ValidationResult, data: dict, field_name: str,
                   minimum: float, maximum: float, label: str) -> Optional[float]:
    """Read a numeric field, recording an error unless minimum <= value <= maximum."""
    value = data.get(field_name)
    if not _is_number(value):
        result.add_error(field_name, f'{label} is required and must be a number')
        return None
    value = float(value)
    if not (minimum <= value <= maximum):
        result.add_error(field_name, f'{label} must be between {minimum:g} and {maximum:g}')
        return None
    return value
