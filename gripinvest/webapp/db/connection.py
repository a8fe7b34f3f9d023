"""Database connection, schema initialization, and context manager."""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

__all__ = ['DB_PATH', 'get_connection', 'get_db', 'init_db', 'set_db_path', 'starting_balance']

# Database file path, override with GRIPINVEST_DATA_DIR env var
_data_dir = Path(os.environ.get('GRIPINVEST_DATA_DIR', str(Path(__file__).parent.parent)))
DB_PATH = _data_dir / "data.db"

DEFAULT_STARTING_BALANCE = 100000.0


def starting_balance() -> float:
    return float(os.environ.get('STARTING_BALANCE', DEFAULT_STARTING_BALANCE))


def set_db_path(path) -> None:
    """Point every subsequent connection at another database file."""
    global DB_PATH
    DB_PATH = Path(path)


def get_connection() -> sqlite3.Connection:
    """Get a database connection with row factory."""
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    """Initialize the database schema."""
    with get_db() as conn:
        cursor = conn.cursor()

        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                first_name TEXT NOT NULL,
                last_name TEXT,
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                risk_appetite TEXT NOT NULL DEFAULT 'moderate'
                    CHECK (risk_appetite IN ('low', 'moderate', 'high')),
                balance REAL NOT NULL DEFAULT {starting_balance()},
                is_admin INTEGER NOT NULL DEFAULT 0,
                email_verified INTEGER NOT NULL DEFAULT 0,
                two_factor_enabled INTEGER NOT NULL DEFAULT 0,
                two_factor_code TEXT,
                two_factor_expires TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Migrations for OTP bookkeeping added after the first release
        for col, col_type in [('two_factor_purpose', 'TEXT'),
                              ('reset_otp', 'TEXT'),
                              ('reset_otp_expires', 'TIMESTAMP')]:
            try:
                cursor.execute(f"ALTER TABLE users ADD COLUMN {col} {col_type}")
            except sqlite3.OperationalError:
                pass  # Column already exists

        # Remembers deleted emails so re-registration can be throttled
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS user_deletions (
                email TEXT PRIMARY KEY,
                last_deletion TIMESTAMP NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS investment_products (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                investment_type TEXT NOT NULL
                    CHECK (investment_type IN ('bond', 'fixed_deposit', 'mutual_fund', 'etf', 'other')),
                tenure_months INTEGER NOT NULL,
                annual_yield REAL NOT NULL,
                risk_level TEXT NOT NULL CHECK (risk_level IN ('low', 'moderate', 'high')),
                min_investment REAL NOT NULL DEFAULT 1000,
                max_investment REAL,
                description TEXT,
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_products_risk ON investment_products(risk_level, is_active)"
        )

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS investments (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                product_id TEXT NOT NULL,
                amount REAL NOT NULL,
                invested_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                status TEXT NOT NULL DEFAULT 'active'
                    CHECK (status IN ('active', 'matured', 'cancelled')),
                expected_return REAL,
                maturity_date DATE,
                notification_read INTEGER NOT NULL DEFAULT 0,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users(id),
                FOREIGN KEY (product_id) REFERENCES investment_products(id)
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_investments_user ON investments(user_id, status)")

        # Balance movements shown on the transactions page
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS financial_transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                investment_id TEXT,
                tx_type TEXT NOT NULL CHECK (tx_type IN ('debit', 'credit')),
                category TEXT NOT NULL,
                amount REAL NOT NULL,
                balance_after REAL,
                description TEXT,
                status TEXT NOT NULL DEFAULT 'completed',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_fin_tx_user ON financial_transactions(user_id, created_at)"
        )

        # API request log
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS transaction_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT,
                email TEXT,
                endpoint TEXT NOT NULL,
                http_method TEXT NOT NULL,
                status_code INTEGER NOT NULL,
                error_message TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_logs_user ON transaction_logs(user_id, created_at)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_logs_email ON transaction_logs(email)")

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS app_config (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    logger.debug(f"Database initialized at {DB_PATH}")
