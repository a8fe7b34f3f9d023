"""Tests for the /api/investments endpoints and maturity processing."""

from datetime import date

import pytest
from dateutil.relativedelta import relativedelta

from gripinvest.models import InvestmentStatus, LedgerCategory, LedgerType
from gripinvest.webapp import db


@pytest.fixture
def product(make_product):
    return make_product(name='Twelve Month Bond', tenure_months=12, annual_yield=10.0,
                        min_investment=1000, max_investment=50000)


def _invest(client, headers, product_id, amount):
    return client.post('/api/investments', headers=headers,
                       json={'product_id': product_id, 'amount': amount})


class TestCreateInvestment:
    """Tests for POST /api/investments."""

    def test_creates_and_deducts_balance(self, client, user, auth_headers, product):
        response = _invest(client, auth_headers(user), product['id'], 10000)
        assert response.status_code == 201
        investment = response.get_json()['data']['investment']
        assert investment['amount'] == 10000
        assert investment['expected_return'] == 11000.0
        assert investment['status'] == 'active'
        assert investment['maturity_date'] == (date.today() + relativedelta(months=12)).isoformat()
        assert db.get_user_balance(user['id']) == 90000.0

    def test_records_debit(self, client, user, auth_headers, product):
        _invest(client, auth_headers(user), product['id'], 5000)
        debits = db.get_user_transactions(user['id'], tx_type='debit')
        assert len(debits) == 1
        assert debits[0]['category'] == 'investment'
        assert debits[0]['amount'] == 5000
        assert debits[0]['balance_after'] == 95000.0

    def test_below_minimum(self, client, user, auth_headers, product):
        response = _invest(client, auth_headers(user), product['id'], 500)
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Minimum investment for this product is ₹1,000'

    def test_above_maximum(self, client, user, auth_headers, product):
        response = _invest(client, auth_headers(user), product['id'], 60000)
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Maximum investment for this product is ₹50,000'

    def test_insufficient_balance(self, client, user, auth_headers, make_product):
        big = make_product(name='Big Ticket', min_investment=1000)
        response = _invest(client, auth_headers(user), big['id'], 150000)
        assert response.status_code == 400
        assert response.get_json()['message'] == (
            'Insufficient balance. Your current balance is ₹1,00,000.00'
        )
        assert db.get_user_balance(user['id']) == 100000.0

    def test_unknown_product(self, client, user, auth_headers):
        response = _invest(client, auth_headers(user), 'missing', 5000)
        assert response.status_code == 404

    def test_invalid_amount(self, client, user, auth_headers, product):
        response = _invest(client, auth_headers(user), product['id'], 0)
        assert response.status_code == 400
        assert response.get_json()['errors'][0]['field'] == 'amount'

    def test_requires_login(self, client, product):
        response = client.post('/api/investments', json={'product_id': product['id'], 'amount': 5000})
        assert response.status_code == 401


class TestPortfolio:

    def test_portfolio(self, client, user, auth_headers, product, make_product):
        headers = auth_headers(user)
        etf = make_product(name='Growth ETF', investment_type='etf', risk_level='high',
                           annual_yield=14.0, tenure_months=24)
        _invest(client, headers, product['id'], 10000)
        _invest(client, headers, etf['id'], 10000)

        response = client.get('/api/investments/portfolio', headers=headers)
        assert response.status_code == 200
        data = response.get_json()['data']

        summary = data['summary']
        assert summary['total_investments'] == 2
        assert summary['total_invested'] == 20000
        # 10000 * 10% * 1y + 10000 * 14% * 2y
        assert summary['total_gains'] == 3800.0
        assert summary['balance'] == 80000.0

        assert {r['risk_level'] for r in data['riskDistribution']} == {'moderate', 'high'}
        assert len(data['investments']) == 2
        assert data['investments'][0]['product_name']
        assert 'Excellent! Your portfolio is generating 19.00% returns' in data['insights']
        assert data['healthScore']['breakdown']['diversification'] == 20

    def test_summary_only(self, client, user, auth_headers):
        response = client.get('/api/investments/portfolio/summary', headers=auth_headers(user))
        data = response.get_json()['data']
        assert set(data) == {'summary', 'insights', 'healthScore'}
        assert data['healthScore']['status'] == 'No Investments'
        assert data['summary']['total_invested'] == 0


class TestInvestmentAccess:

    def test_owner_can_view(self, client, user, auth_headers, product):
        headers = auth_headers(user)
        inv_id = _invest(client, headers, product['id'], 5000).get_json()['data']['investment']['id']
        response = client.get(f'/api/investments/{inv_id}', headers=headers)
        assert response.status_code == 200

    def test_other_user_forbidden(self, client, user, make_user, auth_headers, product):
        inv_id = _invest(client, auth_headers(user), product['id'], 5000) \
            .get_json()['data']['investment']['id']
        other = make_user()
        response = client.get(f'/api/investments/{inv_id}', headers=auth_headers(other))
        assert response.status_code == 403

    def test_admin_can_view(self, client, user, admin, auth_headers, product):
        inv_id = _invest(client, auth_headers(user), product['id'], 5000) \
            .get_json()['data']['investment']['id']
        response = client.get(f'/api/investments/{inv_id}', headers=auth_headers(admin))
        assert response.status_code == 200

    def test_missing(self, client, user, auth_headers):
        response = client.get('/api/investments/nope', headers=auth_headers(user))
        assert response.status_code == 404
        assert response.get_json()['message'] == 'Investment not found'


class TestCancel:
    """Tests for DELETE /api/investments/<id>."""

    def test_cancel_refunds(self, client, user, auth_headers, product):
        headers = auth_headers(user)
        inv_id = _invest(client, headers, product['id'], 8000).get_json()['data']['investment']['id']

        response = client.delete(f'/api/investments/{inv_id}', headers=headers)
        assert response.status_code == 200
        assert db.get_user_balance(user['id']) == 100000.0
        assert db.get_investment_by_id(inv_id)['status'] == 'cancelled'

        refunds = [t for t in db.get_user_transactions(user['id']) if t['category'] == 'refund']
        assert len(refunds) == 1
        assert refunds[0]['tx_type'] == 'credit'

    def test_cancel_twice(self, client, user, auth_headers, product):
        headers = auth_headers(user)
        inv_id = _invest(client, headers, product['id'], 8000).get_json()['data']['investment']['id']
        client.delete(f'/api/investments/{inv_id}', headers=headers)
        response = client.delete(f'/api/investments/{inv_id}', headers=headers)
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Cannot cancel cancelled investment'

    def test_cancel_other_users(self, client, user, make_user, auth_headers, product):
        inv_id = _invest(client, auth_headers(user), product['id'], 8000) \
            .get_json()['data']['investment']['id']
        response = client.delete(f'/api/investments/{inv_id}', headers=auth_headers(make_user()))
        assert response.status_code == 403


class TestMaturity:
    """Maturity processing and the notifications it produces."""

    def test_mature_due_investments(self, client, user, auth_headers, product):
        headers = auth_headers(user)
        inv_id = _invest(client, headers, product['id'], 10000).get_json()['data']['investment']['id']

        assert db.mature_due_investments(date.today()) == []

        matured = db.mature_due_investments(date.today() + relativedelta(months=12))
        assert matured == [inv_id]
        assert db.get_user_balance(user['id']) == 101000.0

        credits = db.get_user_transactions(user['id'], tx_type='credit')
        assert credits[0]['category'] == 'maturity'
        assert credits[0]['amount'] == 11000.0

        summary = db.get_portfolio_summary(user['id'])
        assert summary['total_returns'] == 1000.0
        assert summary['total_investments'] == 0

    def test_notifications(self, client, user, auth_headers, product):
        headers = auth_headers(user)
        inv_id = _invest(client, headers, product['id'], 10000).get_json()['data']['investment']['id']
        db.mature_due_investments(date.today() + relativedelta(months=12))

        response = client.get('/api/investments/notifications', headers=headers)
        notifications = response.get_json()['data']['notifications']
        assert [n['id'] for n in notifications] == [inv_id]

        response = client.put(f'/api/investments/notifications/{inv_id}/read', headers=headers)
        assert response.status_code == 200
        response = client.get('/api/investments/notifications', headers=headers)
        assert response.get_json()['data']['notifications'] == []

    def test_mark_read_unknown(self, client, user, auth_headers):
        response = client.put('/api/investments/notifications/nope/read', headers=auth_headers(user))
        assert response.status_code == 404

    def test_stored_values_match_enums(self, client, user, auth_headers, product):
        headers = auth_headers(user)
        kept = _invest(client, headers, product['id'], 10000).get_json()['data']['investment']['id']
        cancelled = _invest(client, headers, product['id'], 2000).get_json()['data']['investment']['id']
        client.delete(f'/api/investments/{cancelled}', headers=headers)
        db.mature_due_investments(date.today() + relativedelta(months=12))

        assert db.get_investment_by_id(kept)['status'] == InvestmentStatus.MATURED.value
        assert db.get_investment_by_id(cancelled)['status'] == InvestmentStatus.CANCELLED.value

        ledger = db.get_user_transactions(user['id'])
        assert {t['tx_type'] for t in ledger} == {t.value for t in LedgerType}
        assert {t['category'] for t in ledger} == {c.value for c in LedgerCategory}
