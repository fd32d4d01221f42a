"""
Service layer for tasks app.

All business logic for task operations is centralized here.

Services:
- create_task: Create a task under a hierarchy item
- update_task: Update task fields with activity logging
- change_status: TODO / DOING / DONE transitions
- submit_completion_report: Validate and store the evidence report
- complete_task: Report and DONE in one step
- task_queryset: Tasks with everything the serializers read
"""

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.activity_log.models import log_task_activity, TaskActivity
from apps.core.parsing import clean_text, parse_datetime_value
from apps.departments.services import get_active_department, get_active_post
from apps.hierarchy.models import LEVEL_MODELS
from apps.hierarchy.services import resolve_item
from .models import Task, CompletionReport, PARENT_FIELDS
from .recurring import generate_next_instance

logger = logging.getLogger(__name__)

# Reports consisting only of one of these words are rejected
TRIVIAL_RESPONSES = ('ready', 'done', 'ok', 'kész', 'finished', 'completed')

MIN_WHAT_WAS_DONE_LENGTH = 10
MIN_WHERE_CONTEXT_LENGTH = 3

FILE_EVIDENCE_TYPES = (
    CompletionReport.EvidenceType.FILE,
    CompletionReport.EvidenceType.IMAGE,
    CompletionReport.EvidenceType.DOCUMENT,
)


def _clean_title(title):
    title = clean_text(title)
    if not title:
        raise ValidationError('Task title is required.')
    if len(title) > 500:
        raise ValidationError('Task title cannot exceed 500 characters.')
    return title


def _clean_recurrence(is_recurring, recurrence_type, interval, day_of_week, day_of_month):
    if not is_recurring:
        return {
            'is_recurring': False,
            'recurrence_type': Task.RecurrenceType.NONE,
            'recurrence_interval': 1,
            'recurrence_day_of_week': None,
            'recurrence_day_of_month': None,
        }

    recurrence_type = str(recurrence_type or '').upper()
    if recurrence_type not in Task.RecurrenceType.values or recurrence_type == Task.RecurrenceType.NONE:
        raise ValidationError('Recurring tasks need recurrenceType DAILY, WEEKLY, MONTHLY or YEARLY.')

    def _int(value, field, low, high):
        if value in (None, ''):
            return None
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f'{field} must be an integer.')
        if not low <= number <= high:
            raise ValidationError(f'{field} must be between {low} and {high}.')
        return number

    return {
        'is_recurring': True,
        'recurrence_type': recurrence_type,
        'recurrence_interval': _int(interval, 'recurrenceInterval', 1, 365) or 1,
        'recurrence_day_of_week': _int(day_of_week, 'recurrenceDayOfWeek', 0, 6),
        'recurrence_day_of_month': _int(day_of_month, 'recurrenceDayOfMonth', 1, 31),
    }


def create_task(
    title,
    responsible_post_id,
    hierarchy_level,
    parent_item_id,
    creator,
    department_id=None,
    due_date=None,
    is_recurring=False,
    recurrence_type=None,
    recurrence_interval=None,
    recurrence_day_of_week=None,
    recurrence_day_of_month=None,
    recurrence_end_date=None,
):
    """
    Central task creation function.

    Args:
        title: Task title (required)
        responsible_post_id: Active post responsible for the task (required)
        hierarchy_level: SUBGOAL / PLAN / PROGRAM / PROJECT / INSTRUCTION (required)
        parent_item_id: Id of an active item of that level (required)
        creator: User creating the task (required)
        department_id: Explicit department; defaults to the post's department
        due_date: Datetime or ISO string (optional)
        is_recurring and recurrence_*: Recurrence settings (optional)

    Returns:
        Created Task instance

    Raises:
        ValidationError: If required fields are missing or do not resolve
    """
    title = _clean_title(title)

    if responsible_post_id is None:
        raise ValidationError('responsiblePostId is required.')
    if not hierarchy_level:
        raise ValidationError('hierarchyLevel is required.')
    if parent_item_id is None:
        raise ValidationError('parentItemId is required.')
    if creator is None:
        raise ValidationError('Creator is required.')

    parent_item = resolve_item(hierarchy_level, parent_item_id)
    post = get_active_post(responsible_post_id)

    if department_id is not None:
        department = get_active_department(department_id)
    else:
        department = post.department
        if department.is_archived:
            raise ValidationError('The responsible post belongs to an archived department.')

    due_date = parse_datetime_value(due_date, 'dueDate')
    recurrence = _clean_recurrence(
        is_recurring, recurrence_type, recurrence_interval,
        recurrence_day_of_week, recurrence_day_of_month,
    )
    recurrence_end_date = parse_datetime_value(recurrence_end_date, 'recurrenceEndDate')
    if recurrence['is_recurring'] and due_date is None:
        raise ValidationError('Recurring tasks need a dueDate for their first occurrence.')

    with transaction.atomic():
        task = Task(
            title=title,
            responsible_post=post,
            department=department,
            creator=creator,
            due_date=due_date,
            status=Task.Status.TODO,
            recurrence_end_date=recurrence_end_date if recurrence['is_recurring'] else None,
            occurrence_date=due_date if recurrence['is_recurring'] else None,
            **recurrence,
        )
        task.set_parent_item(parent_item)
        task.save()

        log_task_activity(
            task=task,
            user=creator,
            action_type=TaskActivity.ActionType.CREATED,
            description=f'Task created for post {post.name}',
        )

    logger.info(f'Task #{task.pk} created by {creator.email} under {task.hierarchy_level} #{task.parent_item_id}')
    return task


def _display(value):
    if value is None:
        return 'None'
    if hasattr(value, 'strftime'):
        return value.strftime('%d %b %Y, %H:%M')
    return str(value)


def update_task(task, user, **kwargs):
    """
    Update task fields with activity logging.

    Args:
        task: Task instance to update
        user: User performing the update
        **kwargs: title, due_date, responsible_post_id

    Returns:
        Updated Task instance

    Raises:
        ValidationError: If validation fails
    """
    changes = []

    if 'title' in kwargs:
        new_title = _clean_title(kwargs['title'])
        if new_title != task.title:
            changes.append(('title', task.title, new_title))
            task.title = new_title

    if 'due_date' in kwargs:
        new_due = parse_datetime_value(kwargs['due_date'], 'dueDate')
        if new_due != task.due_date:
            changes.append(('due_date', _display(task.due_date), _display(new_due)))
            task.due_date = new_due

    if kwargs.get('responsible_post_id') is not None:
        post = get_active_post(kwargs['responsible_post_id'])
        if post.pk != task.responsible_post_id:
            changes.append(('responsible_post', task.responsible_post.name, post.name))
            task.responsible_post = post

    if not changes:
        return task

    with transaction.atomic():
        task.save()
        for field, old_value, new_value in changes:
            log_task_activity(
                task=task,
                user=user,
                action_type=TaskActivity.ActionType.UPDATED,
                description=f'{field.replace("_", " ").capitalize()} changed from "{old_value}" to "{new_value}"',
                field_name=field,
                old_value=str(old_value),
                new_value=str(new_value),
            )

    return task


def change_status(task, user, new_status):
    """
    Change task status.

    Rules:
    - TODO <-> DOING freely
    - DONE only with a CompletionReport
    - every call refreshes last_updated_at
    - reaching DONE sets completed_at and rolls a recurring task forward;
      leaving DONE clears completed_at

    Returns:
        Updated Task instance

    Raises:
        ValidationError: If the status is unknown or DONE lacks a report
    """
    if new_status not in Task.Status.values:
        raise ValidationError('Invalid status. Must be TODO, DOING, or DONE.')

    if new_status == Task.Status.DONE and not CompletionReport.objects.filter(task=task).exists():
        raise ValidationError(
            'Cannot mark as DONE without a completion report. Submit evidence first.'
        )

    old_status = task.status
    now = timezone.now()

    with transaction.atomic():
        task.status = new_status
        task.last_updated_at = now
        if new_status == Task.Status.DONE:
            if old_status != Task.Status.DONE:
                task.completed_at = now
        else:
            task.completed_at = None
        task.save(update_fields=['status', 'last_updated_at', 'completed_at'])

        if old_status != new_status:
            log_task_activity(
                task=task,
                user=user,
                action_type=TaskActivity.ActionType.STATUS_CHANGED,
                description=f'Status changed from {old_status} to {new_status}',
                field_name='status',
                old_value=old_status,
                new_value=new_status,
            )

        if new_status == Task.Status.DONE and old_status != Task.Status.DONE:
            generate_next_instance(task)

    logger.info(f'Task #{task.pk} status {old_status} -> {new_status}')
    return task


def validate_completion_report(
    what_was_done,
    evidence_type,
    where_context=None,
    evidence_url=None,
    evidence_file_id=None,
):
    """
    Check report fields and return them cleaned.

    Raises:
        ValidationError: On missing, trivial or inconsistent evidence
    """
    what_was_done = what_was_done.strip() if isinstance(what_was_done, str) else ''
    if not what_was_done:
        raise ValidationError('whatWasDone is required.')
    if what_was_done.lower() in TRIVIAL_RESPONSES:
        raise ValidationError(
            'Completion report must contain a meaningful description. '
            '"Ready", "OK" or "Kész" is not acceptable.'
        )
    if len(what_was_done) < MIN_WHAT_WAS_DONE_LENGTH:
        raise ValidationError(
            f'whatWasDone must be at least {MIN_WHAT_WAS_DONE_LENGTH} characters.'
        )

    where_context = where_context.strip() if isinstance(where_context, str) else ''
    if not where_context:
        raise ValidationError('whereContext is required.')
    if len(where_context) < MIN_WHERE_CONTEXT_LENGTH:
        raise ValidationError(
            f'whereContext must be at least {MIN_WHERE_CONTEXT_LENGTH} characters.'
        )

    evidence_type = str(evidence_type or '').upper()
    if not evidence_type:
        raise ValidationError('evidenceType is required.')
    if evidence_type not in CompletionReport.EvidenceType.values:
        raise ValidationError(
            f'Invalid evidenceType. Must be one of {", ".join(CompletionReport.EvidenceType.values)}.'
        )

    evidence_url = evidence_url.strip() if isinstance(evidence_url, str) else ''
    evidence_file_id = evidence_file_id.strip() if isinstance(evidence_file_id, str) else ''
    if evidence_type == CompletionReport.EvidenceType.URL and not evidence_url:
        raise ValidationError('URL evidence type requires evidenceUrl.')
    if evidence_type in FILE_EVIDENCE_TYPES and not evidence_file_id:
        raise ValidationError('File-based evidence type requires evidenceFileId.')

    return {
        'what_was_done': what_was_done,
        'where_context': where_context,
        'evidence_type': evidence_type,
        'evidence_url': evidence_url,
        'evidence_file_id': evidence_file_id,
    }


def submit_completion_report(
    task,
    user,
    what_was_done=None,
    evidence_type=None,
    when_done=None,
    where_context=None,
    evidence_url=None,
    evidence_file_id=None,
    evidence_file_name=None,
):
    """
    Store the completion report of a task without changing its status.

    Returns:
        Created CompletionReport

    Raises:
        ValidationError: If the report is invalid or one already exists
    """
    fields = validate_completion_report(
        what_was_done, evidence_type, where_context, evidence_url, evidence_file_id
    )
    when_done = parse_datetime_value(when_done, 'whenDone') or timezone.now()

    if CompletionReport.objects.filter(task=task).exists():
        raise ValidationError('A completion report already exists for this task.')

    try:
        with transaction.atomic():
            report = CompletionReport.objects.create(
                task=task,
                when_done=when_done,
                evidence_file_name=evidence_file_name.strip() if isinstance(evidence_file_name, str) else '',
                submitted_by=user,
                **fields,
            )
            log_task_activity(
                task=task,
                user=user,
                action_type=TaskActivity.ActionType.REPORT_SUBMITTED,
                description=f'Completion report submitted ({report.get_evidence_type_display()} evidence)',
            )
    except IntegrityError:
        raise ValidationError('A completion report already exists for this task.')

    logger.info(f'Completion report submitted for task #{task.pk} by {user.email}')
    return report


def complete_task(task, user, **report_fields):
    """
    Submit the completion report and move the task to DONE atomically.

    Returns:
        Created CompletionReport
    """
    with transaction.atomic():
        report = submit_completion_report(task, user, **report_fields)
        change_status(task, user, Task.Status.DONE)
    return report


# =============================================================================
# Queries
# =============================================================================

def _ancestor_lookups():
    """select_related paths from a task up through every hierarchy level."""
    lookups = []
    for level, field in PARENT_FIELDS.items():
        model = LEVEL_MODELS[level]
        prefix = field
        while model in LEVEL_MODELS.values():
            lookups.append(f'{prefix}__assigned_post__user')
            prefix = f'{prefix}__{model.parent_field}'
            model = model._meta.get_field(model.parent_field).related_model
        lookups.append(prefix)
    return lookups


def task_queryset():
    """Tasks joined with post, department, report and all ancestors."""
    return Task.objects.select_related(
        'responsible_post__user', 'department', 'completion_report', *_ancestor_lookups()
    )
