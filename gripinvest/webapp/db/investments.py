"""Investments: creation, cancellation, maturity, portfolio aggregates and notifications."""

import logging
import uuid
from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from gripinvest.calculators import calculate_maturity_value
from gripinvest.models import InvestmentStatus, LedgerCategory, LedgerType
from gripinvest.webapp.db.connection import get_db
from gripinvest.webapp.db.ledger import record_ledger_entry
from gripinvest.webapp.db.users import adjust_balance

logger = logging.getLogger(__name__)

__all__ = [
    'compute_maturity_date',
    'create_investment',
    'get_investment_by_id',
    'get_user_portfolio',
    'get_portfolio_summary',
    'get_portfolio_risk_distribution',
    'cancel_investment',
    'get_matured_notifications',
    'mark_notification_read',
    'mature_due_investments',
]

ACTIVE = InvestmentStatus.ACTIVE.value
MATURED = InvestmentStatus.MATURED.value
CANCELLED = InvestmentStatus.CANCELLED.value

_PORTFOLIO_SELECT = """
    SELECT i.id, i.product_id, i.amount, i.invested_at, i.status, i.expected_return,
           i.maturity_date, i.notification_read,
           p.name as product_name, p.investment_type, p.annual_yield,
           p.risk_level, p.tenure_months
    FROM investments i
    JOIN investment_products p ON i.product_id = p.id
"""


def compute_maturity_date(tenure_months: int, start: date = None) -> date:
    """Calendar-month maturity: 31 Jan + 1 month is 28/29 Feb."""
    start = start or date.today()
    return start + relativedelta(months=int(tenure_months))


def create_investment(user_id: str, product: dict, amount: float,
                      today: date = None) -> Optional[str]:
    """
    Invest amount in product, deducting the user's balance.

    The deduction is guarded on the balance inside the same unit of work,
    so the investment is only written when the money is there.

    Returns:
        New investment ID, or None if the balance no longer covers amount.
    """
    investment_id = str(uuid.uuid4())
    expected_return = calculate_maturity_value(amount, product['annual_yield'], product['tenure_months'])
    maturity_date = compute_maturity_date(product['tenure_months'], today)

    with get_db() as conn:
        cursor = conn.execute(
            """UPDATE users SET balance = ROUND(balance - ?, 2), updated_at = CURRENT_TIMESTAMP
               WHERE id = ? AND balance >= ?""",
            (amount, user_id, amount)
        )
        if cursor.rowcount == 0:
            logger.warning(f"Balance check failed while investing for user {user_id}")
            return None

        conn.execute(
            """INSERT INTO investments (id, user_id, product_id, amount, expected_return, maturity_date)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (investment_id, user_id, product['id'], amount, expected_return,
             maturity_date.isoformat())
        )
        record_ledger_entry(conn, user_id, LedgerType.DEBIT.value, LedgerCategory.INVESTMENT.value,
                            amount, description=f"Investment in {product['name']}",
                            investment_id=investment_id)

    logger.info(f"User {user_id} invested {amount} in product {product['id']}")
    return investment_id


def get_investment_by_id(investment_id: str) -> Optional[dict]:
    with get_db() as conn:
        row = conn.execute(
            """SELECT i.*, p.name as product_name, p.investment_type, p.annual_yield,
                      p.risk_level, p.tenure_months
               FROM investments i
               JOIN investment_products p ON i.product_id = p.id
               WHERE i.id = ?""",
            (investment_id,)
        ).fetchone()
        if not row:
            return None
        investment = dict(row)
        investment['notification_read'] = bool(investment['notification_read'])
        return investment


def get_user_portfolio(user_id: str) -> List[dict]:
    """Every investment of a user with product details, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            _PORTFOLIO_SELECT + " WHERE i.user_id = ? ORDER BY i.invested_at DESC, i.rowid DESC",
            (user_id,)
        ).fetchall()
        return [dict(row) for row in rows]


def get_portfolio_summary(user_id: str) -> dict:
    """Totals over active investments plus realised profit from matured ones."""
    with get_db() as conn:
        active = conn.execute(
            """SELECT COUNT(*) as total_investments,
                      COALESCE(SUM(amount), 0) as total_invested,
                      COALESCE(SUM(expected_return), 0) as total_expected_return,
                      COALESCE(SUM(expected_return - amount), 0) as total_gains
               FROM investments
               WHERE user_id = ? AND status = ?""",
            (user_id, ACTIVE)
        ).fetchone()
        matured = conn.execute(
            """SELECT COALESCE(SUM(expected_return - amount), 0) as matured_profit
               FROM investments
               WHERE user_id = ? AND status = ?""",
            (user_id, MATURED)
        ).fetchone()
        balance = conn.execute("SELECT balance FROM users WHERE id = ?", (user_id,)).fetchone()

    summary = dict(active)
    summary['total_gains'] = round(summary['total_gains'], 2)
    summary['total_returns'] = round(matured['matured_profit'], 2)
    summary['balance'] = balance['balance'] if balance else 0.0
    return summary


def get_portfolio_risk_distribution(user_id: str) -> List[dict]:
    with get_db() as conn:
        rows = conn.execute(
            """SELECT p.risk_level, COUNT(*) as count, SUM(i.amount) as total_amount
               FROM investments i
               JOIN investment_products p ON i.product_id = p.id
               WHERE i.user_id = ? AND i.status = ?
               GROUP BY p.risk_level
               ORDER BY total_amount DESC""",
            (user_id, ACTIVE)
        ).fetchall()
        return [dict(row) for row in rows]


def cancel_investment(investment_id: str) -> bool:
    """Cancel an active investment and refund its amount. False if not active."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT user_id, amount FROM investments WHERE id = ? AND status = ?",
            (investment_id, ACTIVE)
        ).fetchone()
        if not row:
            return False
        conn.execute(
            """UPDATE investments SET status = ?, updated_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            (CANCELLED, investment_id)
        )
        adjust_balance(conn, row['user_id'], row['amount'])
        record_ledger_entry(conn, row['user_id'], LedgerType.CREDIT.value, LedgerCategory.REFUND.value,
                            row['amount'],
                            description='Refund for cancelled investment',
                            investment_id=investment_id)
    logger.info(f"Cancelled investment {investment_id}, refunded {row['amount']}")
    return True


def get_matured_notifications(user_id: str) -> List[dict]:
    with get_db() as conn:
        rows = conn.execute(
            """SELECT i.id, i.amount, i.expected_return, i.maturity_date, p.name as product_name
               FROM investments i
               JOIN investment_products p ON i.product_id = p.id
               WHERE i.user_id = ? AND i.status = ? AND i.notification_read = 0
               ORDER BY i.maturity_date DESC""",
            (user_id, MATURED)
        ).fetchall()
        return [dict(row) for row in rows]


def mark_notification_read(investment_id: str, user_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE investments SET notification_read = 1 WHERE id = ? AND user_id = ?",
            (investment_id, user_id)
        )
        return cursor.rowcount > 0


def mature_due_investments(as_of: date = None) -> List[str]:
    """
    Settle every active investment whose maturity date has arrived.

    Each one becomes 'matured' and its expected return is credited to the
    owner's balance with a ledger entry.

    Returns:
        IDs of the investments that matured.
    """
    as_of = as_of or date.today()
    matured_ids = []
    with get_db() as conn:
        rows = conn.execute(
            """SELECT i.id, i.user_id, i.expected_return, p.name as product_name
               FROM investments i
               JOIN investment_products p ON i.product_id = p.id
               WHERE i.status = ? AND i.maturity_date <= ?""",
            (ACTIVE, as_of.isoformat())
        ).fetchall()
        for row in rows:
            conn.execute(
                """UPDATE investments SET status = ?, notification_read = 0,
                                          updated_at = CURRENT_TIMESTAMP
                   WHERE id = ?""",
                (MATURED, row['id'])
            )
            adjust_balance(conn, row['user_id'], row['expected_return'])
            record_ledger_entry(conn, row['user_id'], LedgerType.CREDIT.value, LedgerCategory.MATURITY.value,
                                row['expected_return'],
                                description=f"Maturity payout for {row['product_name']}",
                                investment_id=row['id'])
            matured_ids.append(row['id'])

    if matured_ids:
        logger.info(f"Matured {len(matured_ids)} investments as of {as_of}")
    return matured_ids
