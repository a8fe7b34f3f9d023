"""
Database access layer for the Grip Invest API.

Re-exports all public functions from domain-specific sub-modules.
Import from here or from individual sub-modules:

    from gripinvest.webapp.db import get_all_products
    from gripinvest.webapp.db.products import get_all_products  # same thing
"""

__all__ = [
    # connection
    "DB_PATH", "get_connection", "get_db", "init_db", "set_db_path", "starting_balance",
    # config
    "get_config", "set_config",
    # ledger
    "record_ledger_entry", "get_user_transactions", "get_transaction_by_id",
    "get_transaction_summary",
    # users
    "PUBLIC_USER_COLUMNS", "create_user", "get_user_by_id", "get_user_by_email",
    "get_all_users", "check_user_password", "update_user", "update_password",
    "adjust_balance", "get_user_balance", "set_admin",
    "store_two_factor_code", "clear_two_factor_code", "mark_email_verified",
    "set_two_factor_enabled", "store_password_reset_otp", "delete_user",
    "get_last_deletion_time",
    # products
    "UPDATABLE_PRODUCT_FIELDS", "create_product", "get_all_products", "get_product_by_id",
    "update_product", "delete_product", "get_recommended_products", "get_top_products",
    # investments
    "compute_maturity_date", "create_investment", "get_investment_by_id",
    "get_user_portfolio", "get_portfolio_summary", "get_portfolio_risk_distribution",
    "cancel_investment", "get_matured_notifications", "mark_notification_read",
    "mature_due_investments",
    # logs
    "insert_request_log", "get_logs_by_user_id", "get_logs_by_email", "get_all_logs",
    "get_error_logs_by_user_id", "get_error_summary", "get_logs_by_date_range",
    # alerts
    "ALERT_WINDOW_DAYS", "get_maturing_investments", "get_new_matching_products",
    "count_maturing_investments", "count_new_matching_products",
]

# === Leaf modules (no cross-deps) ===
from gripinvest.webapp.db.connection import *  # noqa: F401,F403
from gripinvest.webapp.db.config import *  # noqa: F401,F403
from gripinvest.webapp.db.ledger import *  # noqa: F401,F403
from gripinvest.webapp.db.products import *  # noqa: F401,F403
from gripinvest.webapp.db.logs import *  # noqa: F401,F403
from gripinvest.webapp.db.alerts import *  # noqa: F401,F403

# === Modules with deps ===
from gripinvest.webapp.db.users import *  # noqa: F401,F403
from gripinvest.webapp.db.investments import *  # noqa: F401,F403
