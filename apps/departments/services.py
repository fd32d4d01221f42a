"""
Service layer for departments app.

Services:
- create_department / update_department / archive_department
- set_department_head
- create_post / update_post / deactivate_post
- resolve_department: the single place where a missing department is defaulted
"""

import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.parsing import clean_text
from .models import Department, Post

logger = logging.getLogger(__name__)

User = get_user_model()


def _clean_name(name, label='Name'):
    name = clean_text(name)
    if not name:
        raise ValidationError(f'{label} is required.')
    if len(name) > 100:
        raise ValidationError(f'{label} cannot exceed 100 characters.')
    return name


def get_active_department(department_id):
    """
    Raises:
        ValidationError: If the department does not exist or is archived
    """
    department = Department.objects.filter(pk=department_id).first()
    if department is None or department.is_archived:
        raise ValidationError('Department not found or archived.')
    return department


def get_active_post(post_id):
    post = Post.objects.select_related('department', 'user').filter(pk=post_id).first()
    if post is None or not post.is_active:
        raise ValidationError('Post not found or inactive.')
    return post


def resolve_department(department_id=None, parent=None):
    """
    Decide which department a new hierarchy item belongs to.

    An explicit department wins; otherwise the parent item's department is
    inherited. There is no company-wide fallback: if neither is available
    the request is rejected.

    Args:
        department_id: Department id from the request (optional)
        parent: Parent hierarchy item, if any

    Returns:
        Department instance

    Raises:
        ValidationError: If no active department can be determined
    """
    if department_id is not None:
        return get_active_department(department_id)

    inherited = getattr(parent, 'department', None)
    if inherited is not None:
        if inherited.is_archived:
            raise ValidationError('Parent item belongs to an archived department.')
        return inherited

    raise ValidationError('departmentId is required.')


# =============================================================================
# Departments
# =============================================================================

def create_department(name, description='', sort_order=None):
    name = _clean_name(name)
    if sort_order is None:
        last = Department.objects.filter(is_active=True).order_by('-sort_order').first()
        sort_order = (last.sort_order + 1) if last else 0

    department = Department.objects.create(
        name=name,
        description=clean_text(description),
        sort_order=sort_order,
    )
    logger.info(f'Department created: {department.name}')
    return department


def update_department(department, **kwargs):
    """
    Update name, description and/or sort order.
    """
    if department.is_archived:
        raise ValidationError('Archived departments cannot be edited.')

    if 'name' in kwargs:
        department.name = _clean_name(kwargs['name'])
    if 'description' in kwargs:
        department.description = clean_text(kwargs['description'])
    if kwargs.get('sort_order') is not None:
        try:
            department.sort_order = int(kwargs['sort_order'])
        except (TypeError, ValueError):
            raise ValidationError('sortOrder must be an integer.')

    department.save()
    return department


def archive_department(department):
    """
    Soft delete a department.

    Blocked while any task, or any active Main Goal / hierarchy item,
    still references the department.

    Raises:
        ValidationError: If the department is still in use
    """
    from apps.hierarchy.models import MainGoal, LEVEL_MODELS
    from apps.tasks.models import Task

    if Task.objects.filter(department=department).exists():
        raise ValidationError(
            'Cannot delete department with active tasks. Reassign or complete tasks first.'
        )

    for model in [MainGoal, *LEVEL_MODELS.values()]:
        if model.objects.filter(department=department, is_active=True).exists():
            raise ValidationError('Cannot delete department with active Ideal Scene elements.')

    with transaction.atomic():
        department.is_active = False
        department.deleted_at = timezone.now()
        department.save(update_fields=['is_active', 'deleted_at', 'updated_at'])
        department.posts.filter(is_active=True).update(is_active=False)

    logger.info(f'Department archived: {department.name}')
    return department


def set_department_head(department, user_id):
    """Assign (or clear, with None) the department head."""
    if user_id is None:
        department.head = None
    else:
        head = User.objects.filter(pk=user_id, is_active=True).first()
        if head is None:
            raise ValidationError('Department head must be an active user.')
        department.head = head

    department.save(update_fields=['head', 'updated_at'])
    return department


# =============================================================================
# Posts
# =============================================================================

def _get_holder(user_id):
    if user_id is None:
        return None
    holder = User.objects.filter(pk=user_id, is_active=True).first()
    if holder is None:
        raise ValidationError('Post holder must be an active user.')
    return holder


def create_post(name, department_id, description='', user_id=None):
    department = get_active_department(department_id)
    post = Post.objects.create(
        name=_clean_name(name),
        description=clean_text(description),
        department=department,
        user=_get_holder(user_id),
    )
    logger.info(f'Post created: {post.name} in {department.name}')
    return post


def update_post(post, **kwargs):
    """
    Update name, description, holder (user_id=None vacates) or department.
    """
    if not post.is_active:
        raise ValidationError('Inactive posts cannot be edited.')

    if 'name' in kwargs:
        post.name = _clean_name(kwargs['name'])
    if 'description' in kwargs:
        post.description = clean_text(kwargs['description'])
    if 'user_id' in kwargs:
        post.user = _get_holder(kwargs['user_id'])
    if kwargs.get('department_id') is not None:
        post.department = get_active_department(kwargs['department_id'])

    post.save()
    return post


def deactivate_post(post):
    post.is_active = False
    post.save(update_fields=['is_active', 'updated_at'])
    logger.info(f'Post deactivated: {post.name}')
    return post
