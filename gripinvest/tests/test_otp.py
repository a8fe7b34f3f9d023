"""Tests for OTP generation and verification."""

from datetime import datetime, timedelta

from gripinvest.otp import generate_otp, otp_expiry, verify_otp

NOW = datetime(2026, 10, 19, 12, 0, 0)
LATER = NOW + timedelta(minutes=10)


class TestGenerateOtp:

    def test_six_digits(self):
        for _ in range(50):
            otp = generate_otp()
            assert len(otp) == 6
            assert 100000 <= int(otp) <= 999999

    def test_expiry_uses_ttl(self, monkeypatch):
        monkeypatch.setenv('OTP_TTL_MINUTES', '5')
        assert otp_expiry(NOW) == NOW + timedelta(minutes=5)


class TestVerifyOtp:
    """Checks run in order: format, presence, expiry, match."""

    def test_valid(self):
        assert verify_otp('123456', LATER, '123456', now=NOW) == (True, 'OTP verified successfully')

    def test_accepts_iso_expiry(self):
        valid, _ = verify_otp('123456', LATER.isoformat(), '123456', now=NOW)
        assert valid

    def test_bad_format_checked_first(self):
        valid, message = verify_otp(None, None, '12ab56', now=NOW)
        assert not valid
        assert message == 'Please provide a valid 6-digit OTP code.'

    def test_nothing_stored(self):
        valid, message = verify_otp(None, None, '123456', now=NOW)
        assert message == 'No OTP found. Please request a new one.'

    def test_expired(self):
        valid, message = verify_otp('123456', NOW - timedelta(seconds=1), '123456', now=NOW)
        assert not valid
        assert message == 'OTP has expired. Please request a new one.'

    def test_mismatch(self):
        valid, message = verify_otp('123456', LATER, '654321', now=NOW)
        assert not valid
        assert message == 'Invalid OTP. Please try again.'

    def test_integer_input(self):
        valid, _ = verify_otp('123456', LATER, 123456, now=NOW)
        assert valid
