"""
Views for the executive dashboard. CEO and executives only.
"""

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.accounts.permissions import IsExecutive
from apps.tasks.serializers import TaskSerializer
from .services import get_summary, get_grid, get_user_tasks, get_department_health


@api_view(['GET'])
@permission_classes([IsExecutive])
def summary_view(request):
    return Response(get_summary())


@api_view(['GET'])
@permission_classes([IsExecutive])
def grid_view(request):
    return Response(get_grid())


@api_view(['GET'])
@permission_classes([IsExecutive])
def user_tasks_view(request, user_id):
    tasks = get_user_tasks(user_id, request.query_params.get('status'))
    return Response(TaskSerializer(tasks, many=True).data)


@api_view(['GET'])
@permission_classes([IsExecutive])
def by_department_view(request):
    return Response(get_department_health())
