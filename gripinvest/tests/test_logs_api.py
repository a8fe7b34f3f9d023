"""Tests for request logging and the /api/logs endpoints."""

from datetime import date, timedelta

from gripinvest.webapp import db
from gripinvest.tests.conftest import PASSWORD


class TestRequestLogging:

    def test_authenticated_request_logged(self, client, user, auth_headers):
        client.get('/api/products?risk_level=low', headers=auth_headers(user))
        logs = db.get_logs_by_user_id(user['id'])
        assert len(logs) == 1
        assert logs[0]['endpoint'] == '/api/products?risk_level=low'
        assert logs[0]['http_method'] == 'GET'
        assert logs[0]['status_code'] == 200
        assert logs[0]['error_message'] is None

    def test_error_message_recorded(self, client, user, auth_headers):
        client.get('/api/investments/missing', headers=auth_headers(user))
        log = db.get_logs_by_user_id(user['id'])[0]
        assert log['status_code'] == 404
        assert log['error_message'] == 'Investment not found'

    def test_login_attributed_to_user(self, client, user):
        client.post('/api/auth/login', json={'email': user['email'], 'password': PASSWORD})
        log = db.get_logs_by_email(user['email'])[0]
        assert log['endpoint'] == '/api/auth/login'
        assert log['user_id'] == user['id']

    def test_anonymous_request_logged(self, client):
        client.get('/api/products')
        log = db.get_all_logs()[0]
        assert log['user_id'] is None
        assert log['endpoint'] == '/api/products'

    def test_health_and_preflight_skipped(self, client):
        client.get('/health')
        client.options('/api/products')
        assert db.get_all_logs() == []


class TestOwnLogs:

    def test_my_logs(self, client, user, auth_headers):
        headers = auth_headers(user)
        client.get('/api/products', headers=headers)
        client.get('/api/transactions', headers=headers)
        body = client.get('/api/logs/me', headers=headers).get_json()
        assert body['results'] == 2
        assert body['data']['logs'][0]['endpoint'] == '/api/transactions'

    def test_my_logs_limit(self, client, user, auth_headers):
        headers = auth_headers(user)
        response = client.get('/api/logs/me?limit=0', headers=headers)
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Limit must be between 1 and 1000'

    def test_my_errors(self, client, user, auth_headers):
        headers = auth_headers(user)
        client.get('/api/investments/missing', headers=headers)
        client.get('/api/investments/also-missing', headers=headers)
        client.get('/api/transactions?type=bad', headers=headers)

        data = client.get('/api/logs/me/errors', headers=headers).get_json()['data']
        assert len(data['errorLogs']) == 3
        assert data['errorSummary'][0] == {
            'status_code': 404,
            'error_count': 2,
            'error_messages': 'Investment not found',
        }
        assert data['insights'][0].startswith('2 not found error(s)')
        assert data['insights'][1].startswith('1 validation error(s)')

    def test_no_errors(self, client, user, auth_headers):
        data = client.get('/api/logs/me/errors', headers=auth_headers(user)).get_json()['data']
        assert data['errorLogs'] == []
        assert data['insights'] == ['No errors detected. All transactions are successful!']


class TestDateRange:

    def _range(self):
        today = date.today()
        return (today - timedelta(days=1)).isoformat(), (today + timedelta(days=1)).isoformat()

    def test_own_logs_in_range(self, client, user, admin, auth_headers):
        client.get('/api/products', headers=auth_headers(admin))
        headers = auth_headers(user)
        client.get('/api/products', headers=headers)

        start, end = self._range()
        body = client.get(f'/api/logs/date-range?startDate={start}&endDate={end}',
                          headers=headers).get_json()
        assert body['results'] == 1
        assert body['data']['logs'][0]['user_id'] == user['id']

    def test_admin_sees_everyone(self, client, user, admin, auth_headers):
        client.get('/api/products', headers=auth_headers(user))
        start, end = self._range()
        body = client.get(f'/api/logs/date-range?startDate={start}&endDate={end}',
                          headers=auth_headers(admin)).get_json()
        assert body['results'] == 1

    def test_missing_dates(self, client, user, auth_headers):
        response = client.get('/api/logs/date-range?startDate=2024-01-01', headers=auth_headers(user))
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Start date and end date are required'

    def test_bad_format(self, client, user, auth_headers):
        response = client.get('/api/logs/date-range?startDate=01-01-2024&endDate=2024-02-01',
                              headers=auth_headers(user))
        assert response.get_json()['message'] == 'Invalid date format. Use YYYY-MM-DD'

    def test_reversed(self, client, user, auth_headers):
        response = client.get('/api/logs/date-range?startDate=2024-02-01&endDate=2024-01-01',
                              headers=auth_headers(user))
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Start date must be before end date'


class TestAdminLogs:

    def test_all_logs_admin_only(self, client, user, auth_headers):
        assert client.get('/api/logs', headers=auth_headers(user)).status_code == 403

    def test_all_logs_with_offset(self, client, admin, auth_headers):
        headers = auth_headers(admin)
        for _ in range(3):
            client.get('/api/products')
        body = client.get('/api/logs?limit=2&offset=1', headers=headers).get_json()
        assert body['results'] == 2

    def test_negative_offset(self, client, admin, auth_headers):
        response = client.get('/api/logs?offset=-1', headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Offset must be a non-negative number'

    def test_logs_for_user(self, client, user, admin, auth_headers):
        client.get('/api/products', headers=auth_headers(user))
        body = client.get(f"/api/logs/user/{user['id']}", headers=auth_headers(admin)).get_json()
        assert body['results'] == 1

    def test_logs_for_email(self, client, user, admin, auth_headers):
        client.get('/api/products', headers=auth_headers(user))
        body = client.get('/api/logs/email/Investor@Example.com',
                          headers=auth_headers(admin)).get_json()
        assert body['results'] == 1

    def test_logs_for_bad_email(self, client, admin, auth_headers):
        response = client.get('/api/logs/email/not-an-email', headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Valid email is required'
