"""
Views for tasks app.

Includes:
- Task list (django-filter) and create
- Task detail and update
- Status change, completion report, complete
- Task activity

Open to any signed-in user.
"""

from django_filters.utils import translate_validation
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.activity_log.models import TaskActivity
from apps.activity_log.serializers import TaskActivitySerializer
from apps.core.parsing import get_or_404, parse_id, parse_bool
from .filters import TaskFilter
from .models import Task
from .serializers import TaskSerializer, TaskDetailSerializer, CompletionReportSerializer
from .services import (
    create_task, update_task, change_status, submit_completion_report, complete_task,
    task_queryset,
)


def _report_fields(data):
    return {
        'what_was_done': data.get('whatWasDone'),
        'evidence_type': data.get('evidenceType'),
        'when_done': data.get('whenDone'),
        'where_context': data.get('whereContext'),
        'evidence_url': data.get('evidenceUrl'),
        'evidence_file_id': data.get('evidenceFileId'),
        'evidence_file_name': data.get('evidenceFileName'),
    }


# =============================================================================
# Tasks
# =============================================================================

@api_view(['GET', 'POST'])
def task_list_view(request):
    """
    GET: tasks newest first, filtered by TaskFilter
    POST: create a task (status TODO, creator = session user)
    """
    if request.method == 'GET':
        filterset = TaskFilter(request.query_params, queryset=task_queryset())
        if not filterset.is_valid():
            raise translate_validation(filterset.errors)
        return Response(TaskSerializer(filterset.qs, many=True).data)

    data = request.data
    task = create_task(
        title=data.get('title'),
        responsible_post_id=parse_id(data.get('responsiblePostId'), 'responsiblePostId'),
        hierarchy_level=data.get('hierarchyLevel'),
        parent_item_id=parse_id(data.get('parentItemId'), 'parentItemId'),
        creator=request.user,
        department_id=parse_id(data.get('departmentId'), 'departmentId', required=False),
        due_date=data.get('dueDate'),
        is_recurring=parse_bool(data.get('isRecurring')),
        recurrence_type=data.get('recurrenceType'),
        recurrence_interval=data.get('recurrenceInterval'),
        recurrence_day_of_week=data.get('recurrenceDayOfWeek'),
        recurrence_day_of_month=data.get('recurrenceDayOfMonth'),
        recurrence_end_date=data.get('recurrenceEndDate'),
    )
    task = task_queryset().get(pk=task.pk)
    return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT'])
def task_detail_view(request, pk):
    task = get_or_404(Task, pk=pk)

    if request.method == 'PUT':
        fields = {}
        if 'title' in request.data:
            fields['title'] = request.data.get('title')
        if 'dueDate' in request.data:
            fields['due_date'] = request.data.get('dueDate')
        if 'responsiblePostId' in request.data:
            fields['responsible_post_id'] = parse_id(
                request.data.get('responsiblePostId'), 'responsiblePostId'
            )
        update_task(task, request.user, **fields)

    task = task_queryset().get(pk=task.pk)
    return Response(TaskDetailSerializer(task).data)


@api_view(['PUT'])
def task_status_view(request, pk):
    task = get_or_404(Task, pk=pk)
    new_status = request.data.get('status')
    change_status(task, request.user, str(new_status).upper() if new_status else new_status)
    return Response(TaskSerializer(task_queryset().get(pk=task.pk)).data)


@api_view(['POST'])
def completion_report_view(request, pk):
    """Store the report only; the status is changed separately."""
    task = get_or_404(Task, pk=pk)
    report = submit_completion_report(task, request.user, **_report_fields(request.data))
    return Response(CompletionReportSerializer(report).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
def task_complete_view(request, pk):
    """Store the report and move the task to DONE."""
    task = get_or_404(Task, pk=pk)
    report = complete_task(task, request.user, **_report_fields(request.data))
    return Response(CompletionReportSerializer(report).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
def task_activity_view(request, pk):
    task = get_or_404(Task, pk=pk)
    entries = TaskActivity.objects.filter(task=task).select_related('user')
    return Response(TaskActivitySerializer(entries, many=True).data)
