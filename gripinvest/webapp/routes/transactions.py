"""Balance movement routes for the transactions page."""

from flask import Blueprint, g, request

from gripinvest.models import LedgerType
from gripinvest.webapp import db
from gripinvest.webapp.auth import login_required
from gripinvest.webapp.errors import ApiError, NotFound
from gripinvest.webapp.routes import parse_limit, success

transactions_bp = Blueprint('transactions', __name__)

TX_TYPES = [t.value for t in LedgerType]


@transactions_bp.route('', methods=['GET'])
@login_required
def list_transactions():
    """Get balance movements for the current user."""
    tx_type = request.args.get('type') or None
    if tx_type and tx_type not in TX_TYPES:
        raise ApiError('Type must be debit or credit', 400)
    limit = parse_limit(default=None)

    transactions = db.get_user_transactions(g.current_user['id'], tx_type=tx_type, limit=limit)
    return success({'transactions': transactions}, results=len(transactions))


@transactions_bp.route('/summary', methods=['GET'])
@login_required
def transaction_summary():
    """Get investment activity totals for the current user."""
    return success({'summary': db.get_transaction_summary(g.current_user['id'])})


@transactions_bp.route('/<int:tx_id>', methods=['GET'])
@login_required
def get_transaction(tx_id):
    """Get a single balance movement."""
    transaction = db.get_transaction_by_id(tx_id, g.current_user['id'])
    if not transaction:
        raise NotFound('Transaction not found')
    return success({'transaction': transaction})
