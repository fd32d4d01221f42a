"""
Service layer for policies app.

Services:
- create_policy / update_policy / archive_policy
- set_policy_posts / remove_policy_post / set_policy_departments
- policies_for_post: what applies to one post
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.core.parsing import clean_text
from apps.departments.models import Department, Post
from .models import Policy, PolicyPost, PolicyDepartment

logger = logging.getLogger(__name__)


def _clean_scope(scope):
    scope = str(scope or Policy.Scope.POST).upper()
    if scope not in Policy.Scope.values:
        raise ValidationError(f'Invalid scope. Must be one of {", ".join(Policy.Scope.values)}.')
    return scope


def _require_text(value, label):
    value = clean_text(value)
    if not value:
        raise ValidationError(f'{label} is required.')
    return value


def _active_posts(post_ids):
    ids = set(post_ids)
    posts = list(Post.objects.filter(pk__in=ids, is_active=True))
    missing = ids - {post.pk for post in posts}
    if missing:
        raise ValidationError(f'Posts not found or inactive: {", ".join(map(str, sorted(missing)))}.')
    return posts


def _active_departments(department_ids):
    ids = set(department_ids)
    departments = list(Department.objects.filter(pk__in=ids, is_active=True, deleted_at__isnull=True))
    missing = ids - {department.pk for department in departments}
    if missing:
        raise ValidationError(
            f'Departments not found or archived: {", ".join(map(str, sorted(missing)))}.'
        )
    return departments


def create_policy(title, content, created_by, scope=None, post_ids=None, department_ids=None):
    """
    Create a policy and its post / department links.

    Raises:
        ValidationError: On a missing title or content, an unknown scope or
            unknown post / department ids
    """
    title = _require_text(title, 'Title')
    content = _require_text(content, 'Content')
    scope = _clean_scope(scope)
    posts = _active_posts(post_ids or [])
    departments = _active_departments(department_ids or [])

    with transaction.atomic():
        policy = Policy.objects.create(
            title=title,
            content=content,
            scope=scope,
            created_by=created_by,
        )
        PolicyPost.objects.bulk_create(PolicyPost(policy=policy, post=post) for post in posts)
        PolicyDepartment.objects.bulk_create(
            PolicyDepartment(policy=policy, department=department) for department in departments
        )

    logger.info(f'Policy created: {policy.title} ({policy.scope})')
    return policy


def update_policy(policy, **kwargs):
    if 'title' in kwargs:
        policy.title = _require_text(kwargs['title'], 'Title')
    if 'content' in kwargs:
        policy.content = _require_text(kwargs['content'], 'Content')
    if 'scope' in kwargs:
        policy.scope = _clean_scope(kwargs['scope'])
    policy.save()
    return policy


def archive_policy(policy):
    policy.is_active = False
    policy.save(update_fields=['is_active', 'updated_at'])
    logger.info(f'Policy archived: {policy.title}')
    return policy


def set_policy_posts(policy, post_ids):
    """Replace the posts a policy is linked to."""
    posts = _active_posts(post_ids)
    with transaction.atomic():
        policy.policy_posts.all().delete()
        PolicyPost.objects.bulk_create(PolicyPost(policy=policy, post=post) for post in posts)
    return policy


def remove_policy_post(policy, post_id):
    deleted, _ = policy.policy_posts.filter(post_id=post_id).delete()
    return deleted


def set_policy_departments(policy, department_ids):
    """Replace the departments a policy is linked to."""
    departments = _active_departments(department_ids)
    with transaction.atomic():
        policy.policy_departments.all().delete()
        PolicyDepartment.objects.bulk_create(
            PolicyDepartment(policy=policy, department=department) for department in departments
        )
    return policy


def policies_for_post(post):
    """
    Active policies that apply to a post.

    Returns:
        dict with postPolicies, departmentPolicies and companyPolicies querysets
    """
    active = Policy.objects.filter(is_active=True).select_related('created_by')
    return {
        'postPolicies': active.filter(policy_posts__post=post).distinct(),
        'departmentPolicies': active.filter(
            policy_departments__department_id=post.department_id
        ).distinct(),
        'companyPolicies': active.filter(scope=Policy.Scope.COMPANY),
    }
