"""
Liveness check for load balancers and uptime monitors.

Plain Django view, outside DRF, so it needs no session.
"""

import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def check_db():
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
    except DatabaseError as exc:
        logger.error(f'Health check: database unavailable: {exc}')
        return {'ok': False, 'error': str(exc)}
    return {'ok': True}


def health(request):
    components = {'db': check_db()}
    all_ok = all(component['ok'] for component in components.values())

    return JsonResponse(
        {'status': 'ok' if all_ok else 'down', 'components': components},
        status=200 if all_ok else 503,
    )
