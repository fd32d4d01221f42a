"""
Task filters using django-filter.

Query parameters are camelCase to match the JSON API:
- status, hierarchyLevel
- departmentId, responsiblePostId
- responsibleUserId (holder of the responsible post)
- isRecurring
"""

import django_filters

from apps.hierarchy.models import HierarchyLevel
from .models import Task


class TaskFilter(django_filters.FilterSet):
    """
    Usage in views:
        filterset = TaskFilter(request.query_params, queryset=queryset)
        tasks = filterset.qs
    """

    status = django_filters.ChoiceFilter(choices=Task.Status.choices)
    hierarchyLevel = django_filters.ChoiceFilter(
        field_name='hierarchy_level',
        choices=HierarchyLevel.choices,
    )
    departmentId = django_filters.NumberFilter(field_name='department_id')
    responsiblePostId = django_filters.NumberFilter(field_name='responsible_post_id')
    responsibleUserId = django_filters.NumberFilter(field_name='responsible_post__user_id')
    isRecurring = django_filters.BooleanFilter(field_name='is_recurring')

    class Meta:
        model = Task
        fields = [
            'status', 'hierarchyLevel', 'departmentId',
            'responsiblePostId', 'responsibleUserId', 'isRecurring',
        ]
