"""Request log routes: own history, error analysis, admin queries."""

import logging
from datetime import datetime

from flask import Blueprint, g, request

from gripinvest.insights import generate_error_insights
from gripinvest.webapp import db
from gripinvest.webapp.auth import admin_required, login_required
from gripinvest.webapp.errors import ApiError
from gripinvest.webapp.routes import parse_limit, success

logger = logging.getLogger(__name__)

logs_bp = Blueprint('logs', __name__)

DATE_FORMAT = '%Y-%m-%d'


def _logs_response(logs):
    return success({'logs': logs}, results=len(logs))


def _parse_date(value: str):
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise ApiError('Invalid date format. Use YYYY-MM-DD', 400)


@logs_bp.route('/me', methods=['GET'])
@login_required
def my_logs():
    """Get request logs for the current user."""
    limit = parse_limit()
    return _logs_response(db.get_logs_by_user_id(g.current_user['id'], limit))


@logs_bp.route('/me/errors', methods=['GET'])
@login_required
def my_error_logs():
    """Get failed requests for the current user with a summary."""
    user_id = g.current_user['id']
    error_logs = db.get_error_logs_by_user_id(user_id)
    error_summary = db.get_error_summary(user_id)
    return success({
        'errorLogs': error_logs,
        'errorSummary': error_summary,
        'insights': generate_error_insights(error_summary),
    }, results=len(error_logs))


@logs_bp.route('/date-range', methods=['GET'])
@login_required
def logs_by_date_range():
    """Get request logs between two dates."""
    start_raw = request.args.get('startDate')
    end_raw = request.args.get('endDate')
    if not start_raw or not end_raw:
        raise ApiError('Start date and end date are required', 400)

    start = _parse_date(start_raw)
    end = _parse_date(end_raw)
    if start > end:
        raise ApiError('Start date must be before end date', 400)

    user_id = None if g.current_user['is_admin'] else g.current_user['id']
    logs = db.get_logs_by_date_range(f'{start.isoformat()} 00:00:00',
                                     f'{end.isoformat()} 23:59:59', user_id)
    return _logs_response(logs)


@logs_bp.route('', methods=['GET'])
@admin_required
def all_logs():
    """Get request logs for every user."""
    limit = parse_limit()
    try:
        offset = int(request.args.get('offset') or 0)
    except ValueError:
        offset = -1
    if offset < 0:
        raise ApiError('Offset must be a non-negative number', 400)
    return _logs_response(db.get_all_logs(limit, offset))


@logs_bp.route('/user/<user_id>', methods=['GET'])
@admin_required
def logs_for_user(user_id):
    """Get request logs for a user."""
    limit = parse_limit()
    return _logs_response(db.get_logs_by_user_id(user_id, limit))


@logs_bp.route('/email/<email>', methods=['GET'])
@admin_required
def logs_for_email(email):
    """Get request logs for an email."""
    if '@' not in email:
        raise ApiError('Valid email is required', 400)
    limit = parse_limit()
    return _logs_response(db.get_logs_by_email(email.strip().lower(), limit))
