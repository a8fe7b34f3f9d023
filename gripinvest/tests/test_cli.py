"""Tests for the gripinvest CLI and the management commands."""

import json

import pytest

from gripinvest.main import main
from gripinvest.webapp import db, manage
from gripinvest.tests.conftest import PASSWORD


class TestCalculatorCli:

    def test_bond(self, capsys):
        main(['calc', 'bond', '--amount', '100000', '--coupon', '8', '--years', '5'])
        result = json.loads(capsys.readouterr().out)
        assert result['numberOfBonds'] == 100
        assert result['totalReturns'] == 140000.0

    def test_lumpsum(self, capsys):
        main(['calc', 'etf', '--mode', 'lumpsum', '--amount', '100000', '--rate', '10',
              '--years', '2'])
        result = json.loads(capsys.readouterr().out)
        assert result['maturityValue'] == 121000.0

    def test_invalid_input_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['calc', 'bond', '--amount', '0', '--coupon', '8', '--years', '5'])
        assert exc.value.code == 1
        assert 'Error: Amount must be greater than zero' in capsys.readouterr().err


class TestManageCommands:
    """Commands run against the app fixture's database."""

    def test_seed_products_is_idempotent(self, app, capsys):
        manage.cmd_seed_products([])
        assert len(db.get_all_products()) == len(manage.SAMPLE_PRODUCTS)
        manage.cmd_seed_products([])
        assert len(db.get_all_products()) == len(manage.SAMPLE_PRODUCTS)
        assert 'Seeded 0 product(s).' in capsys.readouterr().out

    def test_create_admin(self, app, monkeypatch):
        monkeypatch.setattr(manage.getpass, 'getpass', lambda prompt='': PASSWORD)
        manage.cmd_create_admin(['Boss@Example.com', 'Boss'])
        user = db.get_user_by_email('boss@example.com')
        assert user['is_admin'] is True
        assert user['email_verified'] is True

    def test_create_admin_rejects_weak_password(self, app, monkeypatch):
        monkeypatch.setattr(manage.getpass, 'getpass', lambda prompt='': 'weak')
        with pytest.raises(SystemExit):
            manage.cmd_create_admin(['boss@example.com'])
        assert db.get_user_by_email('boss@example.com') is None

    def test_promote_existing_user(self, user, capsys):
        manage.cmd_create_admin([user['email']])
        assert db.get_user_by_id(user['id'])['is_admin'] is True
        assert 'promoted to admin' in capsys.readouterr().out

    def test_mature_investments(self, user, make_product, capsys):
        product = make_product(tenure_months=1)
        db.create_investment(user['id'], product, 5000)
        manage.cmd_mature_investments(['2999-01-01'])
        assert 'Matured 1 investment(s).' in capsys.readouterr().out

    def test_mature_investments_bad_date(self, app):
        with pytest.raises(SystemExit):
            manage.cmd_mature_investments(['tomorrow'])

    def test_list_users(self, user, capsys):
        manage.cmd_list_users([])
        out = capsys.readouterr().out
        assert user['email'] in out
        assert '₹1,00,000.00' in out
