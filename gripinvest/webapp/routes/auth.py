"""Authentication routes: signup, login, OTP verification, password reset, profile."""

import logging
import math
import os
from datetime import datetime, timedelta

from flask import Blueprint, g

from gripinvest.models import OtpPurpose, RiskLevel
from gripinvest.otp import generate_otp, otp_expiry, otp_ttl_minutes, send_otp, verify_otp
from gripinvest.validators import (
    PROFILE_FIELDS,
    check_password_strength,
    normalize_email,
    validate_login,
    validate_otp_body,
    validate_profile_update,
    validate_reset_password,
    validate_reset_request,
    validate_signup,
)
from gripinvest.webapp import db
from gripinvest.webapp.auth import issue_token, login_required
from gripinvest.webapp.errors import ApiError, NotFound, Unauthorized, is_development
from gripinvest.webapp.routes import ensure_valid, json_body, success

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)

DEFAULT_COOLDOWN_HOURS = 24
SIGNUP = OtpPurpose.SIGNUP.value
LOGIN = OtpPurpose.LOGIN.value
OTP_PURPOSES = (SIGNUP, LOGIN)


def _issue_otp(user: dict, purpose: str) -> str:
    otp = generate_otp()
    db.store_two_factor_code(user['id'], otp, otp_expiry(), purpose)
    send_otp(user['email'], otp, purpose)
    return otp


def _pending_code(user: dict, purpose: str):
    """The stored two-factor code if it was issued for purpose."""
    if user.get('two_factor_purpose') != purpose:
        return None
    return user.get('two_factor_code')


def _with_dev_otp(payload: dict, otp: str) -> dict:
    if is_development():
        payload['otp'] = otp
    return payload


def _check_reregister_cooldown(email: str):
    last_deletion = db.get_last_deletion_time(email)
    if not last_deletion:
        return
    hours = int(os.environ.get('REREGISTER_COOLDOWN_HOURS', DEFAULT_COOLDOWN_HOURS))
    wait = last_deletion + timedelta(hours=hours) - datetime.now()
    if wait > timedelta(0):
        remaining = math.ceil(wait.total_seconds() / 3600)
        raise ApiError(
            f'This email was recently deleted. Please wait {remaining} hour(s) '
            f'before registering again', 400
        )


def _user_for_otp(email: str) -> dict:
    user = db.get_user_by_email(email)
    if not user:
        raise NotFound('User not found')
    return user


# ---------------------------------------------------------------------------
# Signup / Login
# ---------------------------------------------------------------------------

@auth_bp.route('/signup', methods=['POST'])
def signup():
    """Register a new user and send an email verification OTP."""
    data = json_body()
    ensure_valid(validate_signup(data))

    email = normalize_email(data['email'])
    if db.get_user_by_email(email):
        raise ApiError('Email already registered', 400)
    _check_reregister_cooldown(email)

    user_id = db.create_user(
        first_name=data['first_name'].strip(),
        email=email,
        password=data['password'],
        last_name=(data.get('last_name') or '').strip() or None,
        risk_appetite=data.get('risk_appetite') or RiskLevel.MODERATE.value,
    )
    user = db.get_user_by_id(user_id)
    g.log_user = user
    otp = _issue_otp(user, SIGNUP)

    payload = {
        'user': user,
        'token': issue_token(user),
        'passwordStrength': check_password_strength(data['password']).to_dict(),
        'requiresVerification': True,
    }
    return success(_with_dev_otp(payload, otp),
                   'User registered successfully. Please verify your email', 201)


@auth_bp.route('/verify-signup', methods=['POST'])
def verify_signup():
    """Verify a new account with its signup OTP."""
    data = json_body()
    ensure_valid(validate_otp_body(data))

    user = _user_for_otp(normalize_email(data['email']))
    g.log_user = user
    if user['email_verified']:
        raise ApiError('Email is already verified', 400)

    valid, message = verify_otp(_pending_code(user, SIGNUP), user.get('two_factor_expires'),
                                data['otp'])
    if not valid:
        raise ApiError(message, 400)

    db.mark_email_verified(user['id'])
    user = db.get_user_by_id(user['id'])
    logger.info(f"Email verified for user {user['id']}")
    return success({'user': user, 'token': issue_token(user)}, 'Email verified successfully')


@auth_bp.route('/login', methods=['POST'])
def login():
    """Log in with email and password."""
    data = json_body()
    ensure_valid(validate_login(data))

    email = normalize_email(data['email'])
    user = db.get_user_by_email(email)
    if not user or not db.check_user_password(user, data['password']):
        raise Unauthorized('Invalid email or password')
    g.log_user = user

    if user['two_factor_enabled']:
        otp = _issue_otp(user, LOGIN)
        payload = {'requires2FA': True, 'email': email}
        return success(_with_dev_otp(payload, otp), 'OTP sent to your email')

    public = db.get_user_by_id(user['id'])
    return success({'user': public, 'token': issue_token(public)}, 'Login successful')


@auth_bp.route('/verify-login', methods=['POST'])
def verify_login():
    """Complete a two-factor login with the emailed OTP."""
    data = json_body()
    ensure_valid(validate_otp_body(data))

    user = _user_for_otp(normalize_email(data['email']))
    g.log_user = user
    valid, message = verify_otp(_pending_code(user, LOGIN), user.get('two_factor_expires'),
                                data['otp'])
    if not valid:
        raise ApiError(message, 400)

    db.clear_two_factor_code(user['id'])
    public = db.get_user_by_id(user['id'])
    return success({'user': public, 'token': issue_token(public)}, 'Login successful')


@auth_bp.route('/resend-otp', methods=['POST'])
def resend_otp():
    """Send a fresh signup or login OTP."""
    data = json_body()
    ensure_valid(validate_reset_request(data))

    purpose = data.get('purpose') or SIGNUP
    if purpose not in OTP_PURPOSES:
        raise ApiError('Purpose must be signup or login', 400)

    user = _user_for_otp(normalize_email(data['email']))
    g.log_user = user
    if purpose == SIGNUP and user['email_verified']:
        raise ApiError('Email is already verified', 400)
    if purpose == LOGIN and (not user['two_factor_enabled']
                            or user.get('two_factor_purpose') != LOGIN):
        raise ApiError('No pending login verification. Please log in again', 400)

    otp = _issue_otp(user, purpose)
    payload = {'expiresIn': f'{otp_ttl_minutes()} minutes'}
    return success(_with_dev_otp(payload, otp), 'A new OTP has been sent to your email')


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

@auth_bp.route('/check-password', methods=['POST'])
def check_password():
    """Score a password without saving it."""
    password = json_body().get('password')
    if not password:
        raise ApiError('Password is required', 400)
    return success({'strength': check_password_strength(password).to_dict()})


@auth_bp.route('/request-password-reset', methods=['POST'])
def request_password_reset():
    """Email a password reset OTP."""
    data = json_body()
    ensure_valid(validate_reset_request(data))

    email = normalize_email(data['email'])
    user = db.get_user_by_email(email)
    if not user:
        raise NotFound('No user found with this email')
    g.log_user = user

    otp = generate_otp()
    db.store_password_reset_otp(email, otp, otp_expiry())
    send_otp(email, otp, OtpPurpose.PASSWORD_RESET.value)

    payload = {'expiresIn': f'{otp_ttl_minutes()} minutes'}
    return success(_with_dev_otp(payload, otp), 'OTP sent to your email')


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    """Set a new password using a reset OTP."""
    data = json_body()
    ensure_valid(validate_reset_password(data))

    user = db.get_user_by_email(normalize_email(data['email']))
    if not user:
        raise ApiError('Invalid or expired OTP', 400)
    g.log_user = user

    valid, _ = verify_otp(user.get('reset_otp'), user.get('reset_otp_expires'), data['otp'])
    if not valid:
        raise ApiError('Invalid or expired OTP', 400)

    strength = check_password_strength(data['newPassword'])
    if not strength.is_strong:
        raise ApiError('Password is not strong enough. ' + ', '.join(strength.feedback), 400)

    db.update_password(user['id'], data['newPassword'])
    logger.info(f"Password reset for user {user['id']}")
    return success(message='Password reset successful. Please login with your new password')


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@auth_bp.route('/profile', methods=['GET'])
@login_required
def get_profile():
    """Get the current user."""
    return success({'user': g.current_user})


@auth_bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    """Update name or risk appetite."""
    data = json_body()
    if not any(data.get(field) is not None for field in PROFILE_FIELDS):
        raise ApiError('No valid fields to update', 400)
    ensure_valid(validate_profile_update(data))

    def _clean(key):
        value = data.get(key)
        return value.strip() if isinstance(value, str) else value

    user = db.update_user(
        g.current_user['id'],
        first_name=_clean('first_name'),
        last_name=_clean('last_name'),
        risk_appetite=data.get('risk_appetite'),
    )
    return success({'user': user}, 'Profile updated successfully')


@auth_bp.route('/profile', methods=['DELETE'])
@login_required
def delete_profile():
    """Delete the current account."""
    db.delete_user(g.current_user['id'])
    return success(message='Account deleted successfully')


@auth_bp.route('/enable-2fa', methods=['POST'])
@login_required
def enable_two_factor():
    """Turn on two-factor login."""
    user = db.set_two_factor_enabled(g.current_user['id'], True)
    return success({'user': user}, 'Two-factor authentication enabled')


@auth_bp.route('/disable-2fa', methods=['POST'])
@login_required
def disable_two_factor():
    """Turn off two-factor login."""
    user = db.set_two_factor_enabled(g.current_user['id'], False)
    db.clear_two_factor_code(user['id'])
    return success({'user': user}, 'Two-factor authentication disabled')
