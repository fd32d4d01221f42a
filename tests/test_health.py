from unittest import mock

import pytest
from django.db import OperationalError

pytestmark = pytest.mark.django_db


def test_health_ok(api_client):
    response = api_client.get('/api/health')

    assert response.status_code == 200
    assert response.json() == {'status': 'ok', 'components': {'db': {'ok': True}}}


def test_health_reports_database_outage(api_client):
    with mock.patch('config.health.connection') as connection:
        connection.cursor.side_effect = OperationalError('database is locked')

        response = api_client.get('/api/health')

    assert response.status_code == 503
    body = response.json()
    assert body['status'] == 'down'
    assert body['components']['db'] == {'ok': False, 'error': 'database is locked'}
