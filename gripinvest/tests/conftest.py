"""Shared fixtures: an app bound to a throwaway database plus user/product factories."""

import itertools

import pytest

from gripinvest.webapp import db
from gripinvest.webapp.auth import issue_token
from gripinvest.webapp.routes import create_app

PASSWORD = 'Str0ng!Pass'
JWT_SECRET = 'test-secret-key-for-the-gripinvest-suite'


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv('GRIPINVEST_ENV', 'development')
    monkeypatch.delenv('JWT_SECRET', raising=False)
    for name in ('STARTING_BALANCE', 'OTP_TTL_MINUTES', 'REREGISTER_COOLDOWN_HOURS', 'JWT_EXPIRE_DAYS'):
        monkeypatch.delenv(name, raising=False)
    return create_app({
        'TESTING': True,
        'DATABASE': str(tmp_path / 'test.db'),
        'JWT_SECRET': JWT_SECRET,
    })


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make(email=None, password=PASSWORD, is_admin=False, risk_appetite='moderate',
              first_name='Test'):
        email = email or f'user{next(counter)}@example.com'
        user_id = db.create_user(first_name, email, password, risk_appetite=risk_appetite,
                                 is_admin=is_admin, email_verified=True)
        return db.get_user_by_id(user_id)
    return _make


@pytest.fixture
def user(make_user):
    return make_user(email='investor@example.com')


@pytest.fixture
def admin(make_user):
    return make_user(email='admin@example.com', is_admin=True)


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        with app.app_context():
            token = issue_token(user)
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
def make_product(app):
    def _make(**overrides):
        fields = {
            'name': 'Test Bond',
            'investment_type': 'bond',
            'tenure_months': 12,
            'annual_yield': 10.0,
            'risk_level': 'moderate',
            'min_investment': 1000,
            'max_investment': None,
        }
        fields.update(overrides)
        return db.get_product_by_id(db.create_product(**fields))
    return _make
