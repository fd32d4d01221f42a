"""
Recurring task generation.

A recurring chain starts with a template task (parent_recurring_task empty).
Each generated instance copies the template's ownership and hierarchy
placement, is due on the next occurrence and points back to the template.

Instances are generated in two places:
- when a recurring task reaches DONE (tasks.services.change_status)
- by the daily scheduled job (tasks.jobs.generate_recurring_tasks)
"""

import calendar
import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.activity_log.models import log_task_activity, TaskActivity
from apps.departments.models import Post
from .models import Task

logger = logging.getLogger(__name__)

RecurrenceType = Task.RecurrenceType


def _add_months(current, months, day=None):
    month_index = current.month - 1 + months
    year = current.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return current.replace(year=year, month=month, day=min(day or current.day, last_day))


def calculate_next_occurrence(current, recurrence_type, interval=1,
                              day_of_week=None, day_of_month=None):
    """
    Date of the occurrence after current.

    Args:
        current: Datetime of the current occurrence
        recurrence_type: One of Task.RecurrenceType
        interval: Step in days, weeks, months or years (minimum 1)
        day_of_week: WEEKLY only, 0 = Sunday ... 6 = Saturday
        day_of_month: MONTHLY only, clamped to the length of the month

    Returns:
        datetime (current unchanged for NONE or unknown types)
    """
    interval = max(int(interval or 1), 1)

    if recurrence_type == RecurrenceType.DAILY:
        return current + timedelta(days=interval)

    if recurrence_type == RecurrenceType.WEEKLY:
        following = current + timedelta(weeks=interval)
        if day_of_week is not None:
            # datetime.weekday() is Monday-based
            sunday_based = (following.weekday() + 1) % 7
            following += timedelta(days=(int(day_of_week) - sunday_based) % 7)
        return following

    if recurrence_type == RecurrenceType.MONTHLY:
        return _add_months(current, interval, day_of_month)

    if recurrence_type == RecurrenceType.YEARLY:
        year = current.year + interval
        last_day = calendar.monthrange(year, current.month)[1]
        return current.replace(year=year, day=min(current.day, last_day))

    return current


def generate_next_instance(task, until=None):
    """
    Create the next TODO instance of a recurring chain.

    Args:
        task: Template or any instance of the chain; the next occurrence is
            counted from its occurrence date (or due date)
        until: Optional upper bound for the next occurrence

    Returns:
        The created Task, or None when nothing was generated
    """
    if not task.is_recurring or task.recurrence_type == RecurrenceType.NONE:
        return None

    now = timezone.now()
    if task.recurrence_end_date and task.recurrence_end_date < now:
        logger.info(f'Recurring task #{task.pk} has ended')
        return None

    base = task.occurrence_date or task.due_date or now
    next_occurrence = calculate_next_occurrence(
        base,
        task.recurrence_type,
        task.recurrence_interval,
        task.recurrence_day_of_week,
        task.recurrence_day_of_month,
    )

    if task.recurrence_end_date and next_occurrence > task.recurrence_end_date:
        logger.info(f'Next occurrence of task #{task.pk} would exceed its end date')
        return None
    if until is not None and next_occurrence > until:
        return None

    parent = task.parent_item
    if not type(parent).objects.filter(pk=parent.pk, is_active=True).exists():
        logger.warning(
            f'Skipping recurring task #{task.pk}: {parent.get_level_display()} #{parent.pk} is inactive'
        )
        return None
    if not Post.objects.filter(pk=task.responsible_post_id, is_active=True).exists():
        logger.warning(f'Skipping recurring task #{task.pk}: post #{task.responsible_post_id} is inactive')
        return None

    template_id = task.parent_recurring_task_id or task.pk
    already_generated = Task.objects.filter(
        Q(pk=template_id) | Q(parent_recurring_task_id=template_id),
        occurrence_date=next_occurrence,
    ).exists()
    if already_generated:
        return None

    with transaction.atomic():
        instance = Task(
            title=task.title,
            responsible_post_id=task.responsible_post_id,
            department_id=task.department_id,
            creator_id=task.creator_id,
            status=Task.Status.TODO,
            due_date=next_occurrence,
            is_recurring=True,
            recurrence_type=task.recurrence_type,
            recurrence_interval=task.recurrence_interval,
            recurrence_day_of_week=task.recurrence_day_of_week,
            recurrence_day_of_month=task.recurrence_day_of_month,
            recurrence_end_date=task.recurrence_end_date,
            parent_recurring_task_id=template_id,
            occurrence_date=next_occurrence,
        )
        instance.set_parent_item(parent)
        instance.save()

        log_task_activity(
            task=instance,
            user=None,
            action_type=TaskActivity.ActionType.RECURRING_GENERATED,
            description=f'Generated from recurring task #{template_id} for {next_occurrence:%Y-%m-%d}',
        )

    logger.info(f'Generated recurring task #{instance.pk} for {next_occurrence.isoformat()}')
    return instance


def _latest_in_chain(template):
    latest = (
        template.recurring_instances
        .order_by('-occurrence_date', '-created_at')
        .first()
    )
    return latest or template


def generate_upcoming_recurring_tasks(lookahead_days=None):
    """
    Make sure every active recurring chain has an open instance ahead.

    For each chain with no TODO task due in the future (the template
    counts), the occurrence after the latest instance of the chain is
    generated, as long as it falls within the look-ahead window.

    Returns:
        int: Number of instances created
    """
    if lookahead_days is None:
        lookahead_days = settings.RECURRING_LOOKAHEAD_DAYS

    now = timezone.now()
    horizon = now + timedelta(days=lookahead_days)

    templates = (
        Task.objects
        .filter(is_recurring=True, parent_recurring_task__isnull=True)
        .exclude(recurrence_type=RecurrenceType.NONE)
    )

    created = 0
    for template in templates:
        has_open_instance = Task.objects.filter(
            Q(pk=template.pk) | Q(parent_recurring_task=template),
            status=Task.Status.TODO,
            due_date__gte=now,
        ).exists()
        if has_open_instance:
            continue
        if generate_next_instance(_latest_in_chain(template), until=horizon):
            created += 1

    logger.info(f'Generated {created} upcoming recurring task instance(s)')
    return created
