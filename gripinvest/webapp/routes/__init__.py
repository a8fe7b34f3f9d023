"""Flask application factory and shared utilities."""

import os
from datetime import date, datetime
from decimal import Decimal

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS

from gripinvest.webapp.errors import ApiError, ValidationFailed

DEFAULT_CORS_ORIGINS = 'http://localhost:3000'


class DecimalJSONProvider(DefaultJSONProvider):
    """JSON provider that handles Decimal and ISO dates."""
    sort_keys = False

    @staticmethod
    def default(obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return DefaultJSONProvider.default(obj)


def success(data=None, message=None, status_code=200, results=None, **extra):
    """Build the {status, message, results, data} success envelope."""
    body = {'status': 'success'}
    if message:
        body['message'] = message
    if results is not None:
        body['results'] = results
    if data is not None:
        body['data'] = data
    body.update(extra)
    return jsonify(body), status_code


def json_body() -> dict:
    """Decoded JSON request body, or {} when absent or malformed."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def ensure_valid(result):
    """Raise ValidationFailed when a ValidationResult has errors."""
    if not result.is_valid:
        raise ValidationFailed(result.errors)


def parse_limit(name='limit', default=100, maximum=1000):
    """Read an integer query parameter in [1, maximum] or raise 400."""
    raw = request.args.get(name)
    if raw in (None, ''):
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1 or value > maximum:
        raise ApiError(f'Limit must be between 1 and {maximum}', 400)
    return value


def create_app(config=None):
    """Create and configure the Flask application.

    Args:
        config: Optional mapping applied over the defaults. A DATABASE key
            points the data layer at another sqlite file.
    """
    app = Flask(__name__)
    app.json = DecimalJSONProvider(app)
    app.url_map.strict_slashes = False
    app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024
    app.config['JWT_EXPIRE_DAYS'] = int(os.environ.get('JWT_EXPIRE_DAYS', 7))
    if config:
        app.config.update(config)

    from gripinvest import __version__ as APP_VERSION
    app.config['APP_VERSION'] = APP_VERSION

    from gripinvest.webapp.db.connection import init_db, set_db_path
    if app.config.get('DATABASE'):
        set_db_path(app.config['DATABASE'])
    init_db()

    origins = [o.strip() for o in
               os.environ.get('CORS_ORIGINS', DEFAULT_CORS_ORIGINS).split(',') if o.strip()]
    CORS(app, origins=origins, supports_credentials=True)

    from gripinvest.webapp.errors import register_error_handlers
    register_error_handlers(app)

    # Initialize authentication (before_request, JWT secret)
    from gripinvest.webapp.auth import init_auth
    init_auth(app)

    from gripinvest.webapp.request_log import init_request_log
    init_request_log(app)

    # Register all blueprints
    from gripinvest.webapp.routes.system import system_bp
    from gripinvest.webapp.routes.auth import auth_bp
    from gripinvest.webapp.routes.products import products_bp
    from gripinvest.webapp.routes.investments import investments_bp
    from gripinvest.webapp.routes.transactions import transactions_bp
    from gripinvest.webapp.routes.logs import logs_bp
    from gripinvest.webapp.routes.alerts import alerts_bp
    from gripinvest.webapp.routes.calculators import calculators_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(products_bp, url_prefix='/api/products')
    app.register_blueprint(investments_bp, url_prefix='/api/investments')
    app.register_blueprint(transactions_bp, url_prefix='/api/transactions')
    app.register_blueprint(logs_bp, url_prefix='/api/logs')
    app.register_blueprint(alerts_bp, url_prefix='/api/alerts')
    app.register_blueprint(calculators_bp, url_prefix='/api/calculators')

    return app
