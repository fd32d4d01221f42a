"""
Scheduled jobs for tasks app, run by the django-q2 cluster.

Registered by the setup_schedules management command.
"""

import logging

from django.conf import settings

from .recurring import generate_upcoming_recurring_tasks

logger = logging.getLogger(__name__)


def generate_recurring_tasks():
    """
    Daily job: top up every recurring chain with its next open instance.

    Returns:
        int: Number of instances created
    """
    created = generate_upcoming_recurring_tasks(settings.RECURRING_LOOKAHEAD_DAYS)
    logger.info(f'Recurring task job finished: {created} instance(s) created')
    return created
