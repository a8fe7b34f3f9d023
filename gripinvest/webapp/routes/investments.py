"""Investment routes: invest, portfolio, notifications, cancel."""

import logging

from flask import Blueprint, g

from gripinvest.helpers import format_currency
from gripinvest.insights import compute_health_score, generate_portfolio_insights
from gripinvest.models import InvestmentStatus
from gripinvest.validators import validate_investment
from gripinvest.webapp import db
from gripinvest.webapp.auth import check_owner_access, login_required
from gripinvest.webapp.errors import ApiError, NotFound
from gripinvest.webapp.routes import ensure_valid, json_body, success

logger = logging.getLogger(__name__)

investments_bp = Blueprint('investments', __name__)


def _portfolio_overview(user_id: str):
    investments = db.get_user_portfolio(user_id)
    summary = db.get_portfolio_summary(user_id)
    risk_distribution = db.get_portfolio_risk_distribution(user_id)
    active = [inv for inv in investments if inv['status'] == InvestmentStatus.ACTIVE.value]
    return {
        'summary': summary,
        'riskDistribution': risk_distribution,
        'investments': investments,
        'insights': generate_portfolio_insights(summary, risk_distribution),
        'healthScore': compute_health_score(active),
    }


def _owned_investment(investment_id: str) -> dict:
    investment = db.get_investment_by_id(investment_id)
    if not investment:
        raise NotFound('Investment not found')
    check_owner_access(investment['user_id'])
    return investment


@investments_bp.route('', methods=['POST'])
@login_required
def create_investment():
    """Invest in a product from the current balance."""
    data = json_body()
    ensure_valid(validate_investment(data))
    user_id = g.current_user['id']
    amount = round(float(data['amount']), 2)

    product = db.get_product_by_id(data['product_id'])
    if not product:
        raise NotFound('Product not found')

    if amount < product['min_investment']:
        raise ApiError(
            f"Minimum investment for this product is {format_currency(product['min_investment'])}", 400)
    if product['max_investment'] and amount > product['max_investment']:
        raise ApiError(
            f"Maximum investment for this product is {format_currency(product['max_investment'])}", 400)

    balance = db.get_user_balance(user_id)
    if amount > balance:
        raise ApiError(
            f"Insufficient balance. Your current balance is {format_currency(balance, decimals=2)}", 400)

    investment_id = db.create_investment(user_id, product, amount)
    if not investment_id:
        raise ApiError('Insufficient balance', 400)

    investment = db.get_investment_by_id(investment_id)
    return success({'investment': investment}, 'Investment created successfully', 201)


@investments_bp.route('/portfolio', methods=['GET'])
@login_required
def get_portfolio():
    """Get the full portfolio with insights and health score."""
    return success(_portfolio_overview(g.current_user['id']))


@investments_bp.route('/portfolio/summary', methods=['GET'])
@login_required
def get_portfolio_summary():
    """Get portfolio totals, insights and health score."""
    overview = _portfolio_overview(g.current_user['id'])
    return success({key: overview[key] for key in ('summary', 'insights', 'healthScore')})


@investments_bp.route('/notifications', methods=['GET'])
@login_required
def get_notifications():
    """Get unread maturity notifications."""
    notifications = db.get_matured_notifications(g.current_user['id'])
    return success({'notifications': notifications}, results=len(notifications))


@investments_bp.route('/notifications/<investment_id>/read', methods=['PUT'])
@login_required
def mark_notification_read(investment_id):
    """Mark a maturity notification as read."""
    if not db.mark_notification_read(investment_id, g.current_user['id']):
        raise NotFound('Notification not found')
    return success(message='Notification marked as read')


@investments_bp.route('/<investment_id>', methods=['GET'])
@login_required
def get_investment(investment_id):
    """Get a single investment."""
    return success({'investment': _owned_investment(investment_id)})


@investments_bp.route('/<investment_id>', methods=['DELETE'])
@login_required
def cancel_investment(investment_id):
    """Cancel an active investment and refund it."""
    investment = _owned_investment(investment_id)
    if investment['status'] != InvestmentStatus.ACTIVE.value:
        raise ApiError(f"Cannot cancel {investment['status']} investment", 400)

    if not db.cancel_investment(investment_id):
        raise ApiError(f"Cannot cancel {investment['status']} investment", 400)
    return success(message='Investment cancelled successfully. Amount refunded to your balance')
