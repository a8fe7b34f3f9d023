"""One-time password generation, delivery and verification."""

import logging
import os
import re
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

OTP_PATTERN = re.compile(r"^\d{6}$")
DEFAULT_TTL_MINUTES = 10


def otp_ttl_minutes() -> int:
    return int(os.environ.get('OTP_TTL_MINUTES', DEFAULT_TTL_MINUTES))


def generate_otp() -> str:
    """Return a random six digit code."""
    return str(secrets.randbelow(900000) + 100000)


def otp_expiry(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now()
    return now + timedelta(minutes=otp_ttl_minutes())


def send_otp(email: str, otp: str, purpose: str = 'verification') -> bool:
    """Deliver an OTP. There is no mail transport; the code goes to the log."""
    logger.info(
        f"OTP for {email} ({purpose}): {otp} - valid for {otp_ttl_minutes()} minutes"
    )
    return True


def _parse_expiry(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def verify_otp(stored_otp: Optional[str], stored_expiry: Union[str, datetime, None],
               provided_otp, now: Optional[datetime] = None) -> Tuple[bool, str]:
    """
    Check a user supplied OTP against the stored code.

    Args:
        stored_otp: Code saved when the OTP was issued
        stored_expiry: Expiry saved with the code (datetime or ISO string)
        provided_otp: Code supplied by the user
        now: Clock override for tests

    Returns:
        (valid, message) tuple.
    """
    provided = str(provided_otp) if provided_otp is not None else ''
    if not OTP_PATTERN.match(provided):
        return False, 'Please provide a valid 6-digit OTP code.'

    if not stored_otp or not stored_expiry:
        return False, 'No OTP found. Please request a new one.'

    now = now or datetime.now()
    if now > _parse_expiry(stored_expiry):
        return False, 'OTP has expired. Please request a new one.'

    if not secrets.compare_digest(str(stored_otp), provided):
        return False, 'Invalid OTP. Please try again.'

    return True, 'OTP verified successfully'
