"""
Views for policies app.

Reads are open to any signed-in user; writes need the CEO or an executive.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.accounts.permissions import IsExecutiveOrReadOnly, IsExecutive
from apps.core.parsing import get_or_404, parse_id_list
from apps.departments.models import Post
from .models import Policy
from .serializers import PolicySerializer, PolicyDetailSerializer
from .services import (
    create_policy, update_policy, archive_policy,
    set_policy_posts, remove_policy_post, set_policy_departments, policies_for_post,
)


def _policy_queryset():
    return Policy.objects.select_related('created_by').prefetch_related('posts__user', 'departments')


@api_view(['GET', 'POST'])
@permission_classes([IsExecutiveOrReadOnly])
def policy_list_view(request):
    """
    GET: active policies, optionally ?scope=COMPANY|DEPARTMENT|POST
    POST: create a policy (creator = session user)
    """
    if request.method == 'GET':
        policies = _policy_queryset().filter(is_active=True)
        scope = request.query_params.get('scope')
        if scope:
            policies = policies.filter(scope=scope.upper())
        return Response(PolicyDetailSerializer(policies, many=True).data)

    policy = create_policy(
        title=request.data.get('title'),
        content=request.data.get('content'),
        created_by=request.user,
        scope=request.data.get('scope'),
        post_ids=parse_id_list(request.data.get('postIds') or [], 'postIds'),
        department_ids=parse_id_list(request.data.get('departmentIds') or [], 'departmentIds'),
    )
    policy = _policy_queryset().get(pk=policy.pk)
    return Response(PolicyDetailSerializer(policy).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsExecutiveOrReadOnly])
def policy_detail_view(request, pk):
    policy = get_or_404(Policy, pk=pk)

    if request.method == 'DELETE':
        archive_policy(policy)
        return Response({'success': True, 'message': 'Policy archived'})

    if request.method == 'PUT':
        fields = {key: request.data.get(key) for key in ('title', 'content', 'scope') if key in request.data}
        update_policy(policy, **fields)

    policy = _policy_queryset().get(pk=policy.pk)
    return Response(PolicyDetailSerializer(policy).data)


@api_view(['POST'])
@permission_classes([IsExecutive])
def policy_posts_view(request, pk):
    policy = get_or_404(Policy, pk=pk)
    set_policy_posts(policy, parse_id_list(request.data.get('postIds'), 'postIds'))
    return Response({'success': True, 'message': 'Posts assigned to policy'})


@api_view(['DELETE'])
@permission_classes([IsExecutive])
def policy_post_remove_view(request, pk, post_id):
    policy = get_or_404(Policy, pk=pk)
    remove_policy_post(policy, post_id)
    return Response({'success': True, 'message': 'Post removed from policy'})


@api_view(['POST'])
@permission_classes([IsExecutive])
def policy_departments_view(request, pk):
    policy = get_or_404(Policy, pk=pk)
    set_policy_departments(policy, parse_id_list(request.data.get('departmentIds'), 'departmentIds'))
    return Response({'success': True, 'message': 'Departments assigned to policy'})


@api_view(['GET'])
def post_policies_view(request, pk):
    post = get_or_404(Post, pk=pk)
    return Response({
        key: PolicySerializer(policies, many=True).data
        for key, policies in policies_for_post(post).items()
    })
