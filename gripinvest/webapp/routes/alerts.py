"""Notification bell: investments about to mature and new matching products."""

import logging

from flask import Blueprint, g

from gripinvest.webapp import db
from gripinvest.webapp.auth import login_required
from gripinvest.webapp.routes import success

logger = logging.getLogger(__name__)

alerts_bp = Blueprint('alerts', __name__)


def _maturity_alert(inv: dict) -> dict:
    days = inv['days_left']
    return {
        'type': 'maturity',
        'message': f"{inv['name']} matures in {days} day{'s' if days != 1 else ''}",
        'amount': inv['expected_return'],
        'days': days,
        'investmentId': inv['id'],
    }


def _product_alert(product: dict) -> dict:
    return {
        'type': 'new_product',
        'message': f"New {product['investment_type']} matches your profile",
        'productName': product['name'],
        'yield': product['annual_yield'],
        'productId': product['id'],
    }


@alerts_bp.route('', methods=['GET'])
@login_required
def get_alerts():
    """Get maturity and new product alerts for the current user."""
    user = g.current_user
    alerts = [_maturity_alert(inv) for inv in db.get_maturing_investments(user['id'])]
    alerts.extend(_product_alert(p) for p in db.get_new_matching_products(user['risk_appetite']))
    logger.debug(f"{len(alerts)} alerts for user {user['id']}")
    return success({'alerts': alerts, 'count': len(alerts)})


@alerts_bp.route('/count', methods=['GET'])
@login_required
def get_alert_count():
    """Get the number of alerts for the current user."""
    user = g.current_user
    count = (db.count_maturing_investments(user['id'])
             + db.count_new_matching_products(user['risk_appetite']))
    return success({'count': count})
