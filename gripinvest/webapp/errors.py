"""API exceptions and the JSON error envelope."""

import logging
import os
import sqlite3

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

__all__ = [
    'ApiError',
    'NotFound',
    'Forbidden',
    'Unauthorized',
    'ValidationFailed',
    'is_development',
    'register_error_handlers',
]


def is_development() -> bool:
    return os.environ.get('GRIPINVEST_ENV', 'production') == 'development'


class ApiError(Exception):
    """Error with an HTTP status and a message safe to show the caller."""

    def __init__(self, message: str, status_code: int = 400, errors=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors

    @property
    def status(self) -> str:
        return 'fail' if 400 <= self.status_code < 500 else 'error'

    def to_dict(self) -> dict:
        body = {'status': self.status, 'message': self.message}
        if self.errors:
            body['errors'] = self.errors
        return body


class NotFound(ApiError):
    def __init__(self, message: str = 'Resource not found'):
        super().__init__(message, 404)


class Forbidden(ApiError):
    def __init__(self, message: str = 'Access denied'):
        super().__init__(message, 403)


class Unauthorized(ApiError):
    def __init__(self, message: str = 'Not authorized. Please login first'):
        super().__init__(message, 401)


class ValidationFailed(ApiError):
    """Rule failures from a ValidationResult, reported together."""

    def __init__(self, errors, message: str = 'Validation failed'):
        super().__init__(message, 400, errors=errors)

    def to_dict(self) -> dict:
        return {'status': 'error', 'message': self.message, 'errors': self.errors}


def register_error_handlers(app):
    """Render every error as {status, message} JSON."""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        if error.code == 404:
            message = 'Route not found'
        else:
            message = error.description or error.name
        status = 'fail' if 400 <= error.code < 500 else 'error'
        return jsonify({'status': status, 'message': message}), error.code

    @app.errorhandler(sqlite3.IntegrityError)
    def handle_integrity_error(error):
        logger.warning(f"Integrity error: {error}")
        if 'UNIQUE' in str(error):
            return jsonify({'status': 'fail',
                            'message': 'Duplicate field value. Please use another value'}), 400
        return jsonify({'status': 'fail', 'message': 'Invalid data'}), 400

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception(f"Unhandled error: {error}")
        body = {'status': 'error', 'message': 'Something went wrong'}
        if is_development():
            body['detail'] = str(error)
        return jsonify(body), 500
