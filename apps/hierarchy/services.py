"""
Service layer for the Ideal Scene hierarchy.

Services:
- get_main_goal / create_main_goal / update_main_goal
- create_item / update_item / assign_owner / deactivate_item
- resolve_item: (level, id) -> active typed row, used by task creation
- HierarchyPathBuilder: root-first ancestor paths for tasks
- build_ideal_scene_tree: the whole active tree under the Main Goal
"""

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Prefetch

from apps.core.parsing import clean_text, parse_datetime_value
from apps.departments.services import resolve_department, get_active_post
from .models import MainGoal, HierarchyItem, HierarchyLevel, LEVEL_MODELS

logger = logging.getLogger(__name__)


def _clean_title(title):
    title = clean_text(title)
    if not title:
        raise ValidationError('Title is required.')
    if len(title) > 500:
        raise ValidationError('Title cannot exceed 500 characters.')
    return title


def parent_model_of(model):
    """The model one level up (MainGoal for Subgoal)."""
    return model._meta.get_field(model.parent_field).related_model


def children_lookup_of(model):
    """Reverse accessor from the parent level down to this model."""
    return model._meta.get_field(model.parent_field).remote_field.related_name


# =============================================================================
# Main Goal
# =============================================================================

def get_main_goal():
    """Return the active Main Goal, or None if the company has not set one."""
    return MainGoal.objects.select_related('department').filter(is_active=True).first()


def create_main_goal(title, description='', department_id=None, ideal_scene_content=''):
    """
    Create the company's Main Goal.

    Raises:
        ValidationError: If an active Main Goal already exists
    """
    title = _clean_title(title)
    department = None
    if department_id is not None:
        department = resolve_department(department_id)

    if MainGoal.objects.filter(is_active=True).exists():
        raise ValidationError('A Main Goal already exists. Update it instead of creating another.')

    try:
        with transaction.atomic():
            goal = MainGoal.objects.create(
                title=title,
                description=clean_text(description),
                ideal_scene_content=clean_text(ideal_scene_content),
                department=department,
            )
    except IntegrityError:
        raise ValidationError('A Main Goal already exists. Update it instead of creating another.')

    logger.info(f'Main Goal created: {goal.title}')
    return goal


def update_main_goal(goal, **kwargs):
    if 'title' in kwargs:
        goal.title = _clean_title(kwargs['title'])
    if 'description' in kwargs:
        goal.description = clean_text(kwargs['description'])
    if 'ideal_scene_content' in kwargs:
        goal.ideal_scene_content = clean_text(kwargs['ideal_scene_content'])
    if 'department_id' in kwargs:
        department_id = kwargs['department_id']
        goal.department = resolve_department(department_id) if department_id is not None else None

    goal.save()
    return goal


# =============================================================================
# Hierarchy items
# =============================================================================

def get_active_parent(model, parent_id):
    """
    Raises:
        ValidationError: If the parent row is missing or inactive
    """
    parent_model = parent_model_of(model)
    parent = parent_model.objects.select_related('department').filter(pk=parent_id).first()
    if parent is None or not parent.is_active:
        raise ValidationError(
            f'{parent_model._meta.verbose_name.capitalize()} not found or inactive.'
        )
    return parent


def create_item(model, title, parent_id, due_date, description='',
                department_id=None, assigned_post_id=None):
    """
    Create one hierarchy item under an active parent.

    Args:
        model: One of the LEVEL_MODELS classes
        title: Item title (required)
        parent_id: Id of the item one level up (required)
        due_date: Datetime or ISO string (required)
        description: Free text (optional)
        department_id: Explicit department; defaults to the parent's
        assigned_post_id: Owning post (optional)

    Returns:
        Created item

    Raises:
        ValidationError: On missing parent, due date or department
    """
    title = _clean_title(title)
    if parent_id is None:
        raise ValidationError(f'{parent_model_of(model)._meta.verbose_name} id is required.')
    due_date = parse_datetime_value(due_date, 'dueDate', required=True)

    parent = get_active_parent(model, parent_id)
    department = resolve_department(department_id, parent)
    assigned_post = get_active_post(assigned_post_id) if assigned_post_id is not None else None

    item = model.objects.create(
        title=title,
        description=clean_text(description),
        department=department,
        assigned_post=assigned_post,
        due_date=due_date,
        **{model.parent_field: parent},
    )
    logger.info(f'{item.get_level_display()} created: {item.title} (#{item.pk})')
    return item


def update_item(item, **kwargs):
    """
    Update title, description, due date and/or department of an item.
    """
    if not item.is_active:
        raise ValidationError('Inactive items cannot be edited.')

    if 'title' in kwargs:
        item.title = _clean_title(kwargs['title'])
    if 'description' in kwargs:
        item.description = clean_text(kwargs['description'])
    if 'due_date' in kwargs:
        item.due_date = parse_datetime_value(kwargs['due_date'], 'dueDate', required=True)
    if kwargs.get('department_id') is not None:
        item.department = resolve_department(kwargs['department_id'])

    item.save()
    return item


def assign_owner(item, post_id):
    """Set (or clear, with None) the post that owns an item."""
    item.assigned_post = get_active_post(post_id) if post_id is not None else None
    item.save(update_fields=['assigned_post', 'updated_at'])
    return item


def deactivate_item(item):
    """
    Soft delete an item together with everything below it.

    Returns:
        int: Number of rows deactivated
    """
    count = 0
    with transaction.atomic():
        pending = [item]
        while pending:
            current = pending.pop()
            if current.is_active:
                current.is_active = False
                current.save(update_fields=['is_active', 'updated_at'])
                count += 1
            if current.children_field:
                pending.extend(getattr(current, current.children_field).filter(is_active=True))

    logger.info(f'{item.get_level_display()} #{item.pk} deactivated ({count} item(s))')
    return count


def resolve_item(level, item_id):
    """
    Turn a (hierarchyLevel, parentItemId) pair into the typed row it names.

    Raises:
        ValidationError: If the level is unknown or the row is missing,
            inactive, or of another level
    """
    try:
        model = LEVEL_MODELS[HierarchyLevel(str(level).upper())]
    except ValueError:
        raise ValidationError(
            f'Invalid hierarchyLevel: {level}. Must be one of {", ".join(HierarchyLevel.values)}.'
        )

    item = model.objects.select_related('department').filter(pk=item_id).first()
    if item is None or not item.is_active:
        raise ValidationError('Parent item not found.')
    return item


# =============================================================================
# Paths and tree
# =============================================================================

def describe_item(item):
    post = item.assigned_post
    return {
        'id': item.pk,
        'title': item.title,
        'level': item.level,
        'dueDate': item.due_date,
        'assignedPost': {
            'id': post.pk,
            'name': post.name,
            'userId': post.user_id,
            'userName': post.user.name if post.user_id else None,
        } if post else None,
    }


class HierarchyPathBuilder:
    """
    Builds root-first ancestor paths for hierarchy items.

    Many tasks share the same ancestors, so every path computed is cached
    for the lifetime of the builder (one request).
    """

    def __init__(self):
        self._paths = {}

    def path(self, item):
        """List of describe_item() dicts from the Subgoal down to item."""
        return self._resolve(item)[0]

    def main_goal(self, item):
        return self._resolve(item)[1]

    def _resolve(self, item):
        key = (item.level, item.pk)
        if key not in self._paths:
            parent = item.parent
            if isinstance(parent, HierarchyItem):
                prefix, goal = self._resolve(parent)
            else:
                prefix, goal = [], parent
            self._paths[key] = (prefix + [describe_item(item)], goal)
        return self._paths[key]


def _tree_prefetch(models, department_id=None):
    model, *rest = models
    queryset = model.objects.filter(is_active=True).select_related('assigned_post__user')
    if department_id is not None:
        queryset = queryset.filter(department_id=department_id)
    if rest:
        queryset = queryset.prefetch_related(_tree_prefetch(rest))
    return Prefetch(children_lookup_of(model), queryset=queryset)


def _tree_node(item):
    node = describe_item(item)
    node['description'] = item.description
    node['departmentId'] = item.department_id
    if item.children_field:
        node[item.children_field] = [
            _tree_node(child) for child in getattr(item, item.children_field).all()
        ]
    return node


def build_ideal_scene_tree(department_id=None):
    """
    The active Main Goal with all active items nested below it.

    Args:
        department_id: Only include subgoals of this department (optional)

    Returns:
        dict, or None if there is no Main Goal
    """
    goal = (
        MainGoal.objects.filter(is_active=True)
        .select_related('department')
        .prefetch_related(_tree_prefetch(list(LEVEL_MODELS.values()), department_id))
        .first()
    )
    if goal is None:
        return None

    return {
        'id': goal.pk,
        'title': goal.title,
        'description': goal.description,
        'idealSceneContent': goal.ideal_scene_content,
        'departmentId': goal.department_id,
        'subgoals': [_tree_node(subgoal) for subgoal in goal.subgoals.all()],
    }
