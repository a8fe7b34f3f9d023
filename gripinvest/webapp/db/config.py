"""Key/value application settings stored in the database."""

from typing import Optional

from gripinvest.webapp.db.connection import get_db

__all__ = ['get_config', 'set_config']


def get_config(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get a config value by key."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT value FROM app_config WHERE key = ?", (key,)
        ).fetchone()
        return row['value'] if row else default


def set_config(key: str, value: str) -> bool:
    """Set a config value (insert or update)."""
    with get_db() as conn:
        conn.execute(
            "INSERT INTO app_config (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
            (key, value)
        )
        return True
