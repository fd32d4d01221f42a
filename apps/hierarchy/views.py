"""
Views for the Ideal Scene hierarchy.

Includes:
- Main Goal singleton (get / create / update)
- Full tree
- Per-level list, create, detail, update, owner, soft delete

Reads are open to any signed-in user; writes need the CEO or an executive.
"""

from django.core.exceptions import ValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.accounts.permissions import IsExecutiveOrReadOnly, IsExecutive
from apps.core.parsing import get_or_404, parse_id
from .models import URL_TYPES
from .serializers import MainGoalSerializer, HierarchyItemSerializer
from .services import (
    get_main_goal, create_main_goal, update_main_goal,
    create_item, update_item, assign_owner, deactivate_item,
    build_ideal_scene_tree,
)


def _model_for(item_type):
    """
    Raises:
        ValidationError: If the URL segment is not a hierarchy level
    """
    try:
        return URL_TYPES[item_type]
    except KeyError:
        raise ValidationError('Invalid hierarchy type')


def _parent_key(model):
    # mainGoalId, subgoalId, planId, ...
    head, *tail = model.parent_field.split('_')
    return head + ''.join(part.capitalize() for part in tail) + 'Id'


# =============================================================================
# Main Goal
# =============================================================================

@api_view(['GET', 'POST', 'PUT'])
@permission_classes([IsExecutiveOrReadOnly])
def main_goal_view(request):
    """
    GET: the active Main Goal
    POST: create it (only when none exists)
    PUT: update title, description, ideal scene content or department
    """
    if request.method == 'POST':
        goal = create_main_goal(
            title=request.data.get('title'),
            description=request.data.get('description', ''),
            department_id=parse_id(request.data.get('departmentId'), 'departmentId', required=False),
            ideal_scene_content=request.data.get('idealSceneContent', ''),
        )
        return Response(MainGoalSerializer(goal).data, status=status.HTTP_201_CREATED)

    goal = get_main_goal()
    if goal is None:
        raise Http404('Main goal not found')

    if request.method == 'PUT':
        fields = {}
        for key, field in (
            ('title', 'title'),
            ('description', 'description'),
            ('idealSceneContent', 'ideal_scene_content'),
        ):
            if key in request.data:
                fields[field] = request.data.get(key)
        if 'departmentId' in request.data:
            fields['department_id'] = parse_id(
                request.data.get('departmentId'), 'departmentId', required=False
            )
        update_main_goal(goal, **fields)

    return Response(MainGoalSerializer(goal).data)


@api_view(['GET'])
def ideal_scene_view(request):
    department_id = parse_id(request.query_params.get('departmentId'), 'departmentId', required=False)
    tree = build_ideal_scene_tree(department_id)
    if tree is None:
        raise Http404('Main goal not found')
    return Response(tree)


# =============================================================================
# Hierarchy items
# =============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsExecutiveOrReadOnly])
def item_list_view(request, item_type):
    model = _model_for(item_type)

    if request.method == 'GET':
        items = model.objects.filter(is_active=True).select_related('assigned_post__user')
        parent_id = parse_id(request.query_params.get('parentId'), 'parentId', required=False)
        if parent_id is not None:
            items = items.filter(**{f'{model.parent_field}_id': parent_id})
        department_id = parse_id(request.query_params.get('departmentId'), 'departmentId', required=False)
        if department_id is not None:
            items = items.filter(department_id=department_id)
        return Response(HierarchyItemSerializer(items, many=True).data)

    parent_key = _parent_key(model)
    item = create_item(
        model,
        title=request.data.get('title'),
        parent_id=parse_id(request.data.get(parent_key, request.data.get('parentId')), parent_key),
        due_date=request.data.get('dueDate'),
        description=request.data.get('description', ''),
        department_id=parse_id(request.data.get('departmentId'), 'departmentId', required=False),
        assigned_post_id=parse_id(request.data.get('assignedPostId'), 'assignedPostId', required=False),
    )
    return Response(HierarchyItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsExecutiveOrReadOnly])
def item_detail_view(request, item_type, pk):
    model = _model_for(item_type)
    item = get_or_404(model, pk=pk)

    if request.method == 'DELETE':
        deactivate_item(item)
        return Response({'message': 'Item deleted successfully'})

    if request.method == 'PUT':
        fields = {}
        for key, field in (('title', 'title'), ('description', 'description'), ('dueDate', 'due_date')):
            if key in request.data:
                fields[field] = request.data.get(key)
        if 'departmentId' in request.data:
            fields['department_id'] = parse_id(request.data.get('departmentId'), 'departmentId')
        update_item(item, **fields)

    return Response(HierarchyItemSerializer(item).data)


@api_view(['PUT'])
@permission_classes([IsExecutive])
def item_owner_view(request, item_type, pk):
    model = _model_for(item_type)
    item = get_or_404(model, pk=pk)
    post_id = parse_id(request.data.get('assignedPostId'), 'assignedPostId', required=False)
    assign_owner(item, post_id)
    return Response(HierarchyItemSerializer(item).data)
