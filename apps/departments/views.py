"""
Views for departments app.

Includes:
- Department list / create / update / archive, department head
- Post list per department, post create / update / deactivate

Reads are open to any signed-in user; writes need the CEO or an executive.
"""

from django.db.models import Prefetch
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.accounts.permissions import IsExecutiveOrReadOnly, IsExecutive
from apps.core.parsing import get_or_404, parse_id
from .models import Department, Post
from .serializers import DepartmentSerializer, PostSerializer
from .services import (
    create_department, update_department, archive_department, set_department_head,
    create_post, update_post, deactivate_post,
)


def _department_queryset():
    return Department.objects.select_related('head').prefetch_related(
        Prefetch('posts', queryset=Post.objects.filter(is_active=True).select_related('user'))
    )


# =============================================================================
# Departments
# =============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsExecutiveOrReadOnly])
def department_list_view(request):
    """
    GET: active departments in org-chart order, with head and posts
    POST: create a department
    """
    if request.method == 'GET':
        departments = _department_queryset().filter(is_active=True, deleted_at__isnull=True)
        return Response(DepartmentSerializer(departments, many=True).data)

    sort_order = request.data.get('sortOrder')
    department = create_department(
        name=request.data.get('name'),
        description=request.data.get('description', ''),
        sort_order=parse_id(sort_order, 'sortOrder', required=False),
    )
    return Response(DepartmentSerializer(department).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsExecutiveOrReadOnly])
def department_detail_view(request, pk):
    department = get_or_404(Department, pk=pk)

    if request.method == 'GET':
        return Response(DepartmentSerializer(department).data)

    if request.method == 'DELETE':
        archive_department(department)
        return Response({'success': True, 'message': 'Department archived'})

    fields = {}
    for key, field in (('name', 'name'), ('description', 'description'), ('sortOrder', 'sort_order')):
        if key in request.data:
            fields[field] = request.data.get(key)
    update_department(department, **fields)
    return Response(DepartmentSerializer(department).data)


@api_view(['PUT'])
@permission_classes([IsExecutive])
def department_head_view(request, pk):
    department = get_or_404(Department, pk=pk)
    head_id = parse_id(request.data.get('departmentHeadId'), 'departmentHeadId', required=False)
    set_department_head(department, head_id)
    return Response(DepartmentSerializer(department).data)


# =============================================================================
# Posts
# =============================================================================

@api_view(['GET'])
def department_posts_view(request, pk):
    department = get_or_404(Department, pk=pk)
    posts = department.posts.filter(is_active=True).select_related('user')
    return Response(PostSerializer(posts, many=True).data)


@api_view(['POST'])
@permission_classes([IsExecutive])
def post_create_view(request):
    post = create_post(
        name=request.data.get('name'),
        department_id=parse_id(request.data.get('departmentId'), 'departmentId'),
        description=request.data.get('description', ''),
        user_id=parse_id(request.data.get('userId'), 'userId', required=False),
    )
    return Response(PostSerializer(post).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsExecutiveOrReadOnly])
def post_detail_view(request, pk):
    post = get_or_404(Post, pk=pk)

    if request.method == 'GET':
        return Response(PostSerializer(post).data)

    if request.method == 'DELETE':
        deactivate_post(post)
        return Response({'success': True, 'message': 'Post deactivated'})

    fields = {}
    if 'name' in request.data:
        fields['name'] = request.data.get('name')
    if 'description' in request.data:
        fields['description'] = request.data.get('description')
    if 'userId' in request.data:
        fields['user_id'] = parse_id(request.data.get('userId'), 'userId', required=False)
    if 'departmentId' in request.data:
        fields['department_id'] = parse_id(request.data.get('departmentId'), 'departmentId')
    update_post(post, **fields)
    return Response(PostSerializer(post).data)
