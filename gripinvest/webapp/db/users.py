"""User accounts, balances, OTP storage and account deletion."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from gripinvest.models import LedgerCategory, LedgerType, RiskLevel
from gripinvest.webapp.db.connection import get_db, starting_balance
from gripinvest.webapp.db.ledger import record_ledger_entry

logger = logging.getLogger(__name__)

__all__ = [
    'PUBLIC_USER_COLUMNS',
    'create_user',
    'get_user_by_id',
    'get_user_by_email',
    'get_all_users',
    'check_user_password',
    'update_user',
    'update_password',
    'adjust_balance',
    'get_user_balance',
    'set_admin',
    'store_two_factor_code',
    'clear_two_factor_code',
    'mark_email_verified',
    'set_two_factor_enabled',
    'store_password_reset_otp',
    'delete_user',
    'get_last_deletion_time',
]

PUBLIC_USER_COLUMNS = (
    "id, first_name, last_name, email, risk_appetite, balance, is_admin, "
    "email_verified, two_factor_enabled, created_at"
)
_BOOL_COLUMNS = ('is_admin', 'email_verified', 'two_factor_enabled')


def _public(row) -> Optional[dict]:
    if row is None:
        return None
    user = dict(row)
    for col in _BOOL_COLUMNS:
        if col in user:
            user[col] = bool(user[col])
    return user


def create_user(first_name: str, email: str, password: str, last_name: str = None,
                risk_appetite: str = RiskLevel.MODERATE.value, is_admin: bool = False,
                email_verified: bool = False) -> str:
    """Create a user credited with the starting balance. Returns the user ID."""
    user_id = str(uuid.uuid4())
    balance = starting_balance()
    password_hash = generate_password_hash(password, method='pbkdf2:sha256')
    with get_db() as conn:
        conn.execute(
            """INSERT INTO users (id, first_name, last_name, email, password_hash,
                                  risk_appetite, balance, is_admin, email_verified)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (user_id, first_name, last_name or None, email, password_hash,
             risk_appetite or RiskLevel.MODERATE.value, balance, int(is_admin), int(email_verified))
        )
        if balance > 0:
            record_ledger_entry(conn, user_id, LedgerType.CREDIT.value,
                                LedgerCategory.SIGNUP_BONUS.value, balance,
                                description='Welcome balance')
    logger.info(f"Created user {user_id} ({email})")
    return user_id


def get_user_by_id(user_id: str) -> Optional[dict]:
    """Get a user by ID without credentials or OTP columns."""
    with get_db() as conn:
        row = conn.execute(
            f"SELECT {PUBLIC_USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return _public(row)


def get_user_by_email(email: str) -> Optional[dict]:
    """Get the full user row (including password hash and OTP state) by email."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        return _public(row)


def get_all_users() -> List[dict]:
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT {PUBLIC_USER_COLUMNS} FROM users ORDER BY created_at"
        ).fetchall()
        return [_public(row) for row in rows]


def check_user_password(user: dict, password: str) -> bool:
    if not user or not password:
        return False
    return check_password_hash(user['password_hash'], password)


def update_user(user_id: str, first_name: str = None, last_name: str = None,
                risk_appetite: str = None) -> Optional[dict]:
    """Update profile fields that are not None. Returns the updated user."""
    fields = []
    values = []
    if first_name is not None:
        fields.append("first_name = ?")
        values.append(first_name)
    if last_name is not None:
        fields.append("last_name = ?")
        values.append(last_name)
    if risk_appetite is not None:
        fields.append("risk_appetite = ?")
        values.append(risk_appetite)
    if fields:
        fields.append("updated_at = CURRENT_TIMESTAMP")
        values.append(user_id)
        with get_db() as conn:
            conn.execute(f"UPDATE users SET {', '.join(fields)} WHERE id = ?", values)
    return get_user_by_id(user_id)


def update_password(user_id: str, new_password: str) -> bool:
    """Replace the password hash and discard any pending reset code."""
    password_hash = generate_password_hash(new_password, method='pbkdf2:sha256')
    with get_db() as conn:
        conn.execute(
            """UPDATE users SET password_hash = ?, reset_otp = NULL, reset_otp_expires = NULL,
                                updated_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            (password_hash, user_id)
        )
        return True


def adjust_balance(conn, user_id: str, delta: float) -> None:
    """Add delta (negative to deduct) to a balance inside the caller's unit of work."""
    conn.execute(
        "UPDATE users SET balance = ROUND(balance + ?, 2), updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (delta, user_id)
    )


def get_user_balance(user_id: str) -> float:
    with get_db() as conn:
        row = conn.execute("SELECT balance FROM users WHERE id = ?", (user_id,)).fetchone()
        return row['balance'] if row else 0.0


def set_admin(user_id: str, is_admin: bool = True) -> None:
    with get_db() as conn:
        conn.execute("UPDATE users SET is_admin = ? WHERE id = ?", (int(is_admin), user_id))


def store_two_factor_code(user_id: str, code: str, expires: datetime, purpose: str) -> None:
    """Save a signup or login OTP, replacing any earlier one."""
    with get_db() as conn:
        conn.execute(
            """UPDATE users SET two_factor_code = ?, two_factor_expires = ?, two_factor_purpose = ?,
                                updated_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            (code, expires.isoformat(), purpose, user_id)
        )


def clear_two_factor_code(user_id: str) -> None:
    with get_db() as conn:
        conn.execute(
            """UPDATE users SET two_factor_code = NULL, two_factor_expires = NULL,
                                two_factor_purpose = NULL
               WHERE id = ?""",
            (user_id,)
        )


def mark_email_verified(user_id: str) -> None:
    with get_db() as conn:
        conn.execute(
            """UPDATE users SET email_verified = 1, two_factor_code = NULL,
                                two_factor_expires = NULL, two_factor_purpose = NULL,
                                updated_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            (user_id,)
        )


def set_two_factor_enabled(user_id: str, enabled: bool) -> Optional[dict]:
    with get_db() as conn:
        conn.execute(
            "UPDATE users SET two_factor_enabled = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (int(enabled), user_id)
        )
    return get_user_by_id(user_id)


def store_password_reset_otp(email: str, otp: str, expires: datetime) -> bool:
    """Save a password reset code. Returns False when no such user exists."""
    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE users SET reset_otp = ?, reset_otp_expires = ? WHERE email = ?",
            (otp, expires.isoformat(), email)
        )
        return cursor.rowcount > 0


def delete_user(user_id: str) -> bool:
    """Delete a user and everything they own, remembering when the email left."""
    with get_db() as conn:
        row = conn.execute("SELECT email FROM users WHERE id = ?", (user_id,)).fetchone()
        if not row:
            return False
        conn.execute(
            """INSERT INTO user_deletions (email, last_deletion) VALUES (?, ?)
               ON CONFLICT(email) DO UPDATE SET last_deletion = excluded.last_deletion""",
            (row['email'], datetime.now().isoformat())
        )
        conn.execute("DELETE FROM financial_transactions WHERE user_id = ?", (user_id,))
        conn.execute("DELETE FROM investments WHERE user_id = ?", (user_id,))
        conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
    logger.info(f"Deleted user {user_id}")
    return True


def get_last_deletion_time(email: str) -> Optional[datetime]:
    with get_db() as conn:
        row = conn.execute(
            "SELECT last_deletion FROM user_deletions WHERE email = ?", (email,)
        ).fetchone()
        return datetime.fromisoformat(row['last_deletion']) if row else None
