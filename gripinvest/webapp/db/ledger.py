"""Balance movements (financial_transactions) and the investment activity summary."""

import logging
import sqlite3
from typing import List, Optional

from gripinvest.models import InvestmentStatus
from gripinvest.webapp.db.connection import get_db

logger = logging.getLogger(__name__)

__all__ = [
    'record_ledger_entry',
    'get_user_transactions',
    'get_transaction_by_id',
    'get_transaction_summary',
]


def record_ledger_entry(conn: sqlite3.Connection, user_id: str, tx_type: str, category: str,
                        amount: float, description: str = None,
                        investment_id: str = None) -> int:
    """Insert a ledger row inside the caller's unit of work.

    balance_after is read from the users row, so call this after the
    balance update it describes.
    """
    row = conn.execute("SELECT balance FROM users WHERE id = ?", (user_id,)).fetchone()
    balance_after = row['balance'] if row else None
    cursor = conn.execute(
        """INSERT INTO financial_transactions
               (user_id, investment_id, tx_type, category, amount, balance_after, description)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (user_id, investment_id, tx_type, category, amount, balance_after, description)
    )
    return cursor.lastrowid


def get_user_transactions(user_id: str, tx_type: str = None, limit: int = None) -> List[dict]:
    """Ledger rows for a user, newest first."""
    sql = "SELECT * FROM financial_transactions WHERE user_id = ?"
    params = [user_id]
    if tx_type:
        sql += " AND tx_type = ?"
        params.append(tx_type)
    sql += " ORDER BY created_at DESC, id DESC"
    if limit:
        sql += " LIMIT ?"
        params.append(int(limit))
    with get_db() as conn:
        return [dict(row) for row in conn.execute(sql, params).fetchall()]


def get_transaction_by_id(tx_id: int, user_id: str) -> Optional[dict]:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM financial_transactions WHERE id = ? AND user_id = ?",
            (tx_id, user_id)
        ).fetchone()
        return dict(row) if row else None


def get_transaction_summary(user_id: str) -> dict:
    """Counts and totals over every investment the user has made."""
    with get_db() as conn:
        row = conn.execute(
            """SELECT
                   COUNT(*) as total_transactions,
                   COALESCE(SUM(CASE WHEN status = ? THEN expected_return ELSE 0 END), 0)
                       as total_credits,
                   COALESCE(SUM(amount), 0) as total_debits,
                   COALESCE(SUM(CASE WHEN status = ? THEN 1 ELSE 0 END), 0)
                       as active_investments,
                   COALESCE(SUM(CASE WHEN status = ? THEN 1 ELSE 0 END), 0)
                       as cancelled_investments
               FROM investments
               WHERE user_id = ?""",
            (InvestmentStatus.MATURED.value, InvestmentStatus.ACTIVE.value,
             InvestmentStatus.CANCELLED.value, user_id)
        ).fetchone()
        return dict(row)
