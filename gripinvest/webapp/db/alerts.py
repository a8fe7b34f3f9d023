"""Queries behind the notification bell: upcoming maturities and new matching products."""

from datetime import date, timedelta
from typing import List, Optional

from gripinvest.models import InvestmentStatus
from gripinvest.webapp.db.connection import get_db

__all__ = [
    'ALERT_WINDOW_DAYS',
    'get_maturing_investments',
    'get_new_matching_products',
    'count_maturing_investments',
    'count_new_matching_products',
]

ALERT_WINDOW_DAYS = 7
NEW_PRODUCT_LIMIT = 5
ACTIVE = InvestmentStatus.ACTIVE.value


def _window(today: date = None):
    today = today or date.today()
    return today.isoformat(), (today + timedelta(days=ALERT_WINDOW_DAYS)).isoformat()


def get_maturing_investments(user_id: str, today: date = None) -> List[dict]:
    """Active investments maturing within the alert window, soonest first."""
    start, end = _window(today)
    with get_db() as conn:
        rows = conn.execute(
            """SELECT i.id, p.name, i.amount, i.expected_return, i.maturity_date,
                      CAST(julianday(i.maturity_date) - julianday(?) AS INTEGER) as days_left
               FROM investments i
               JOIN investment_products p ON i.product_id = p.id
               WHERE i.user_id = ? AND i.status = ?
                 AND i.maturity_date BETWEEN ? AND ?
               ORDER BY i.maturity_date""",
            (start, user_id, ACTIVE, start, end)
        ).fetchall()
        return [dict(row) for row in rows]


def get_new_matching_products(risk_level: Optional[str]) -> List[dict]:
    """Active products at risk_level added within the alert window."""
    if not risk_level:
        return []
    with get_db() as conn:
        rows = conn.execute(
            """SELECT id, name, annual_yield, risk_level, investment_type
               FROM investment_products
               WHERE risk_level = ? AND is_active = 1
                 AND created_at >= datetime('now', ?)
               ORDER BY created_at DESC LIMIT ?""",
            (risk_level, f'-{ALERT_WINDOW_DAYS} days', NEW_PRODUCT_LIMIT)
        ).fetchall()
        return [dict(row) for row in rows]


def count_maturing_investments(user_id: str, today: date = None) -> int:
    start, end = _window(today)
    with get_db() as conn:
        row = conn.execute(
            """SELECT COUNT(*) as count FROM investments
               WHERE user_id = ? AND status = ?
                 AND maturity_date BETWEEN ? AND ?""",
            (user_id, ACTIVE, start, end)
        ).fetchone()
        return row['count']


def count_new_matching_products(risk_level: Optional[str]) -> int:
    if not risk_level:
        return 0
    with get_db() as conn:
        row = conn.execute(
            """SELECT COUNT(*) as count FROM investment_products
               WHERE risk_level = ? AND is_active = 1
                 AND created_at >= datetime('now', ?)""",
            (risk_level, f'-{ALERT_WINDOW_DAYS} days')
        ).fetchone()
        return row['count']
