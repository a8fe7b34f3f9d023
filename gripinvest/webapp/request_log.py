"""Write one transaction_logs row per API request."""

import logging

from flask import g, request

from gripinvest.webapp.db.logs import insert_request_log

logger = logging.getLogger(__name__)

SKIP_PATHS = {'/health'}


def _error_message(response):
    if response.status_code < 400 or not response.is_json:
        return None
    body = response.get_json(silent=True) or {}
    return body.get('message')


def init_request_log(app):
    """Record every request except health checks and CORS preflight."""

    @app.after_request
    def log_request(response):
        if request.method == 'OPTIONS' or request.path in SKIP_PATHS:
            return response

        user = g.get('current_user') or g.get('log_user')
        endpoint = request.full_path.rstrip('?') if request.query_string else request.path
        try:
            insert_request_log(
                user['id'] if user else None,
                user['email'] if user else None,
                endpoint,
                request.method,
                response.status_code,
                _error_message(response),
            )
        except Exception as e:
            logger.error(f"Failed to write request log for {request.path}: {e}")
        return response
