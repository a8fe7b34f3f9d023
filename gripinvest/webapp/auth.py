"""Authentication and authorization module.

Provides:
- issue_token(user) / decode_token(token)  - HS256 JWT helpers
- init_auth(app)      - wire before_request, JWT secret
- @login_required     - decorator: 401 without a valid bearer token
- @admin_required     - decorator: 403 for non-admin users
- check_owner_access(owner_id) - raise 403 unless owner or admin
"""

import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, request

from gripinvest.webapp.db.config import get_config, set_config
from gripinvest.webapp.db.users import get_user_by_id
from gripinvest.webapp.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

JWT_ALGORITHM = 'HS256'
DEFAULT_EXPIRE_DAYS = 7

TOKEN_EXPIRED = 'Your token has expired. Please log in again'
TOKEN_INVALID = 'Invalid token. Please log in again'
NOT_LOGGED_IN = 'Not authorized. Please login first'


# ---------------------------------------------------------------------------
# Secret key management
# ---------------------------------------------------------------------------

def _ensure_jwt_secret(app):
    """Use JWT_SECRET from config or env, else a persistent key from app_config."""
    key = app.config.get('JWT_SECRET') or os.environ.get('JWT_SECRET')
    if not key:
        key = get_config('jwt_secret')
        if not key:
            key = secrets.token_hex(32)
            set_config('jwt_secret', key)
    app.config['JWT_SECRET'] = key


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

def issue_token(user: dict) -> str:
    """Sign a token carrying the user's id and email."""
    now = datetime.now(timezone.utc)
    days = int(current_app.config.get('JWT_EXPIRE_DAYS')
               or os.environ.get('JWT_EXPIRE_DAYS', DEFAULT_EXPIRE_DAYS))
    payload = {
        'userId': user['id'],
        'email': user['email'],
        'iat': now,
        'exp': now + timedelta(days=days),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET'], algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify a token. Raises Unauthorized with the reason on failure."""
    try:
        return jwt.decode(token, current_app.config['JWT_SECRET'], algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized(TOKEN_EXPIRED)
    except jwt.InvalidTokenError:
        raise Unauthorized(TOKEN_INVALID)


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip() or None
    return None


# ---------------------------------------------------------------------------
# Decorators
# ---------------------------------------------------------------------------

def login_required(f):
    """Decorator: require a valid bearer token for an existing user."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not g.get('current_user'):
            raise Unauthorized(g.get('auth_error') or NOT_LOGGED_IN)
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    """Decorator: require the current user to be an admin."""
    @wraps(f)
    @login_required
    def decorated(*args, **kwargs):
        if not g.current_user['is_admin']:
            raise Forbidden('Access denied. Admin privileges required')
        return f(*args, **kwargs)
    return decorated


def check_owner_access(owner_id: str, message: str = 'Access denied'):
    """Raise 403 unless the current user owns the resource or is an admin."""
    user = g.current_user
    if user['is_admin'] or user['id'] == owner_id:
        return
    raise Forbidden(message)


# ---------------------------------------------------------------------------
# App initialization
# ---------------------------------------------------------------------------

def init_auth(app):
    """Wire authentication into the Flask app."""
    _ensure_jwt_secret(app)

    @app.before_request
    def load_user():
        g.current_user = None
        g.auth_error = None

        token = _bearer_token()
        if not token:
            return

        try:
            payload = decode_token(token)
        except Unauthorized as e:
            g.auth_error = e.message
            return

        user = get_user_by_id(payload.get('userId'))
        if not user:
            g.auth_error = 'User not found'
            return

        g.current_user = user
