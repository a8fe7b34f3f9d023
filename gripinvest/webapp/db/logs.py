"""API request log (transaction_logs) writes and queries."""

import logging
from typing import List, Optional

from gripinvest.webapp.db.connection import get_db

logger = logging.getLogger(__name__)

__all__ = [
    'insert_request_log',
    'get_logs_by_user_id',
    'get_logs_by_email',
    'get_all_logs',
    'get_error_logs_by_user_id',
    'get_error_summary',
    'get_logs_by_date_range',
]


def insert_request_log(user_id: Optional[str], email: Optional[str], endpoint: str,
                       http_method: str, status_code: int,
                       error_message: Optional[str] = None) -> int:
    with get_db() as conn:
        cursor = conn.execute(
            """INSERT INTO transaction_logs
                   (user_id, email, endpoint, http_method, status_code, error_message)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (user_id, email, endpoint, http_method, status_code, error_message)
        )
        return cursor.lastrowid


def get_logs_by_user_id(user_id: str, limit: int = 100) -> List[dict]:
    with get_db() as conn:
        rows = conn.execute(
            """SELECT * FROM transaction_logs WHERE user_id = ?
               ORDER BY created_at DESC, id DESC LIMIT ?""",
            (user_id, int(limit))
        ).fetchall()
        return [dict(row) for row in rows]


def get_logs_by_email(email: str, limit: int = 100) -> List[dict]:
    with get_db() as conn:
        rows = conn.execute(
            """SELECT * FROM transaction_logs WHERE email = ?
               ORDER BY created_at DESC, id DESC LIMIT ?""",
            (email, int(limit))
        ).fetchall()
        return [dict(row) for row in rows]


def get_all_logs(limit: int = 100, offset: int = 0) -> List[dict]:
    with get_db() as conn:
        rows = conn.execute(
            """SELECT * FROM transaction_logs
               ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?""",
            (int(limit), int(offset))
        ).fetchall()
        return [dict(row) for row in rows]


def get_error_logs_by_user_id(user_id: str) -> List[dict]:
    with get_db() as conn:
        rows = conn.execute(
            """SELECT * FROM transaction_logs
               WHERE user_id = ? AND status_code >= 400
               ORDER BY created_at DESC, id DESC""",
            (user_id,)
        ).fetchall()
        return [dict(row) for row in rows]


def get_error_summary(user_id: str) -> List[dict]:
    """Error counts per status code with the distinct messages seen."""
    with get_db() as conn:
        rows = conn.execute(
            """SELECT status_code, COUNT(*) as error_count
               FROM transaction_logs
               WHERE user_id = ? AND status_code >= 400
               GROUP BY status_code
               ORDER BY error_count DESC, status_code""",
            (user_id,)
        ).fetchall()
        summary = []
        for row in rows:
            messages = conn.execute(
                """SELECT DISTINCT error_message FROM transaction_logs
                   WHERE user_id = ? AND status_code = ? AND error_message IS NOT NULL
                   ORDER BY error_message""",
                (user_id, row['status_code'])
            ).fetchall()
            entry = dict(row)
            entry['error_messages'] = '; '.join(m['error_message'] for m in messages) or None
            summary.append(entry)
        return summary


def get_logs_by_date_range(start: str, end: str, user_id: Optional[str] = None) -> List[dict]:
    """Logs with created_at between start and end timestamps (inclusive)."""
    sql = "SELECT * FROM transaction_logs WHERE created_at BETWEEN ? AND ?"
    params = [start, end]
    if user_id:
        sql += " AND user_id = ?"
        params.append(user_id)
    sql += " ORDER BY created_at DESC, id DESC"
    with get_db() as conn:
        return [dict(row) for row in conn.execute(sql, params).fetchall()]
