"""Tests for the /api/transactions and /api/alerts endpoints."""

from datetime import date, timedelta

import pytest

from gripinvest.webapp.db.connection import get_db


def _invest(client, headers, product_id, amount):
    response = client.post('/api/investments', headers=headers,
                           json={'product_id': product_id, 'amount': amount})
    return response.get_json()['data']['investment']['id']


class TestTransactions:

    @pytest.fixture
    def history(self, client, user, auth_headers, make_product):
        headers = auth_headers(user)
        product = make_product()
        kept = _invest(client, headers, product['id'], 5000)
        cancelled = _invest(client, headers, product['id'], 3000)
        client.delete(f'/api/investments/{cancelled}', headers=headers)
        return headers, kept, cancelled

    def test_list_newest_first(self, client, history):
        headers, _, _ = history
        body = client.get('/api/transactions', headers=headers).get_json()
        assert body['results'] == 4
        categories = [t['category'] for t in body['data']['transactions']]
        assert categories == ['refund', 'investment', 'investment', 'signup_bonus']

    def test_filter_by_type(self, client, history):
        headers, _, _ = history
        body = client.get('/api/transactions?type=debit', headers=headers).get_json()
        assert {t['tx_type'] for t in body['data']['transactions']} == {'debit'}
        assert body['results'] == 2

    def test_invalid_type(self, client, user, auth_headers):
        response = client.get('/api/transactions?type=transfer', headers=auth_headers(user))
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Type must be debit or credit'

    def test_limit(self, client, history):
        headers, _, _ = history
        body = client.get('/api/transactions?limit=1', headers=headers).get_json()
        assert body['results'] == 1

    def test_summary(self, client, history):
        headers, _, _ = history
        summary = client.get('/api/transactions/summary', headers=headers).get_json()['data']['summary']
        assert summary['total_transactions'] == 2
        assert summary['total_debits'] == 8000
        assert summary['total_credits'] == 0
        assert summary['active_investments'] == 1
        assert summary['cancelled_investments'] == 1

    def test_get_one(self, client, history):
        headers, _, _ = history
        first = client.get('/api/transactions', headers=headers).get_json()['data']['transactions'][0]
        response = client.get(f"/api/transactions/{first['id']}", headers=headers)
        assert response.status_code == 200
        assert response.get_json()['data']['transaction']['category'] == 'refund'

    def test_other_users_transaction_hidden(self, client, history, make_user, auth_headers):
        headers, _, _ = history
        first = client.get('/api/transactions', headers=headers).get_json()['data']['transactions'][0]
        response = client.get(f"/api/transactions/{first['id']}", headers=auth_headers(make_user()))
        assert response.status_code == 404
        assert response.get_json()['message'] == 'Transaction not found'

    def test_requires_login(self, client):
        assert client.get('/api/transactions').status_code == 401


class TestAlerts:
    """Tests for the notification bell."""

    def test_maturity_and_new_product(self, client, user, auth_headers, make_product):
        headers = auth_headers(user)
        product = make_product(name='Short Bond', risk_level='moderate')
        inv_id = _invest(client, headers, product['id'], 5000)
        with get_db() as conn:
            conn.execute("UPDATE investments SET maturity_date = ? WHERE id = ?",
                         ((date.today() + timedelta(days=3)).isoformat(), inv_id))

        data = client.get('/api/alerts', headers=headers).get_json()['data']
        assert data['count'] == 2

        maturity, new_product = data['alerts']
        assert maturity == {
            'type': 'maturity',
            'message': 'Short Bond matures in 3 days',
            'amount': 5500.0,
            'days': 3,
            'investmentId': inv_id,
        }
        assert new_product['type'] == 'new_product'
        assert new_product['message'] == 'New bond matches your profile'
        assert new_product['productId'] == product['id']

        count = client.get('/api/alerts/count', headers=headers).get_json()['data']['count']
        assert count == 2

    def test_maturing_today(self, client, user, auth_headers, make_product):
        headers = auth_headers(user)
        product = make_product(name='Same Day Bond')
        inv_id = _invest(client, headers, product['id'], 5000)
        with get_db() as conn:
            conn.execute("UPDATE investments SET maturity_date = ? WHERE id = ?",
                         (date.today().isoformat(), inv_id))

        alerts = client.get('/api/alerts', headers=headers).get_json()['data']['alerts']
        maturity = [a for a in alerts if a['type'] == 'maturity']
        assert maturity[0]['days'] == 0
        assert maturity[0]['message'] == 'Same Day Bond matures in 0 days'

    def test_far_maturity_and_other_risk_ignored(self, client, user, auth_headers, make_product):
        headers = auth_headers(user)
        product = make_product(risk_level='high')
        _invest(client, headers, product['id'], 5000)

        data = client.get('/api/alerts', headers=headers).get_json()['data']
        assert data == {'alerts': [], 'count': 0}
        assert client.get('/api/alerts/count', headers=headers).get_json()['data']['count'] == 0

    def test_old_products_not_new(self, client, user, auth_headers, make_product):
        product = make_product()
        with get_db() as conn:
            conn.execute(
                "UPDATE investment_products SET created_at = datetime('now', '-30 days') WHERE id = ?",
                (product['id'],))
        data = client.get('/api/alerts', headers=auth_headers(user)).get_json()['data']
        assert data['count'] == 0

    def test_requires_login(self, client):
        assert client.get('/api/alerts').status_code == 401
