"""Investment product catalogue CRUD."""

import logging
import uuid
from typing import List, Optional

from gripinvest.webapp.db.connection import get_db

logger = logging.getLogger(__name__)

__all__ = [
    'UPDATABLE_PRODUCT_FIELDS',
    'create_product',
    'get_all_products',
    'get_product_by_id',
    'update_product',
    'delete_product',
    'get_recommended_products',
    'get_top_products',
]

UPDATABLE_PRODUCT_FIELDS = (
    'name', 'investment_type', 'tenure_months', 'annual_yield', 'risk_level',
    'min_investment', 'max_investment', 'description',
)


def _row(row) -> Optional[dict]:
    if row is None:
        return None
    product = dict(row)
    product['is_active'] = bool(product['is_active'])
    return product


def create_product(name: str, investment_type: str, tenure_months: int, annual_yield: float,
                   risk_level: str, min_investment: float = 1000, max_investment: float = None,
                   description: str = None) -> str:
    """Create a product and return its ID."""
    product_id = str(uuid.uuid4())
    with get_db() as conn:
        conn.execute(
            """INSERT INTO investment_products
                   (id, name, investment_type, tenure_months, annual_yield, risk_level,
                    min_investment, max_investment, description)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (product_id, name, investment_type, int(tenure_months), float(annual_yield),
             risk_level, float(min_investment), max_investment, description)
        )
    logger.info(f"Created product {product_id} ({name})")
    return product_id


def get_all_products(investment_type: str = None, risk_level: str = None,
                     min_yield: float = None) -> List[dict]:
    """Active products matching the optional filters, highest yield first."""
    sql = "SELECT * FROM investment_products WHERE is_active = 1"
    params = []
    if investment_type:
        sql += " AND investment_type = ?"
        params.append(investment_type)
    if risk_level:
        sql += " AND risk_level = ?"
        params.append(risk_level)
    if min_yield is not None:
        sql += " AND annual_yield >= ?"
        params.append(min_yield)
    sql += " ORDER BY annual_yield DESC, name"
    with get_db() as conn:
        return [_row(row) for row in conn.execute(sql, params).fetchall()]


def get_product_by_id(product_id: str, include_inactive: bool = False) -> Optional[dict]:
    sql = "SELECT * FROM investment_products WHERE id = ?"
    if not include_inactive:
        sql += " AND is_active = 1"
    with get_db() as conn:
        return _row(conn.execute(sql, (product_id,)).fetchone())


def update_product(product_id: str, updates: dict) -> Optional[dict]:
    """Apply whitelisted field updates. Returns the product, or None if missing."""
    fields = []
    values = []
    for key in UPDATABLE_PRODUCT_FIELDS:
        if key in updates:
            fields.append(f"{key} = ?")
            values.append(updates[key])
    if not fields:
        return get_product_by_id(product_id)
    fields.append("updated_at = CURRENT_TIMESTAMP")
    values.append(product_id)
    with get_db() as conn:
        cursor = conn.execute(
            f"UPDATE investment_products SET {', '.join(fields)} WHERE id = ? AND is_active = 1",
            values
        )
        if cursor.rowcount == 0:
            return None
    return get_product_by_id(product_id)


def delete_product(product_id: str) -> bool:
    """Soft delete. Existing investments keep pointing at the row."""
    with get_db() as conn:
        cursor = conn.execute(
            """UPDATE investment_products SET is_active = 0, updated_at = CURRENT_TIMESTAMP
               WHERE id = ? AND is_active = 1""",
            (product_id,)
        )
        return cursor.rowcount > 0


def get_recommended_products(risk_appetite: str, limit: int = 5) -> List[dict]:
    with get_db() as conn:
        rows = conn.execute(
            """SELECT * FROM investment_products
               WHERE risk_level = ? AND is_active = 1
               ORDER BY annual_yield DESC LIMIT ?""",
            (risk_appetite, limit)
        ).fetchall()
        return [_row(row) for row in rows]


def get_top_products(limit: int = 5) -> List[dict]:
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM investment_products WHERE is_active = 1 ORDER BY annual_yield DESC LIMIT ?",
            (limit,)
        ).fetchall()
        return [_row(row) for row in rows]
