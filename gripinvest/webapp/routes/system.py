"""Health check and API index."""

import os
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

system_bp = Blueprint('system', __name__)


@system_bp.route('/health')
def health():
    """Health check."""
    return jsonify({
        'status': 'success',
        'message': 'Server is running',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'environment': os.environ.get('GRIPINVEST_ENV', 'production'),
    })


@system_bp.route('/')
def index():
    """API index."""
    return jsonify({
        'message': 'Welcome to Grip Invest API',
        'version': current_app.config['APP_VERSION'],
        'endpoints': {
            'health': '/health',
            'auth': '/api/auth',
            'products': '/api/products',
            'investments': '/api/investments',
            'transactions': '/api/transactions',
            'logs': '/api/logs',
            'alerts': '/api/alerts',
            'calculators': '/api/calculators',
        },
    })
