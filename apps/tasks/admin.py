"""
Admin configuration for tasks app.
"""

from django.contrib import admin
from .models import Task, CompletionReport


class CompletionReportInline(admin.StackedInline):
    model = CompletionReport
    extra = 0
    can_delete = False
    readonly_fields = ('submitted_by', 'created_at')


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    list_display = (
        'id', 'title', 'status', 'responsible_post', 'department',
        'hierarchy_level', 'due_date', 'is_recurring', 'created_at'
    )
    list_filter = ('status', 'hierarchy_level', 'is_recurring', 'department')
    search_fields = ('title', 'responsible_post__name', 'responsible_post__user__name')
    date_hierarchy = 'created_at'
    inlines = [CompletionReportInline]

    readonly_fields = ('created_at', 'last_updated_at', 'completed_at', 'parent_recurring_task')

    fieldsets = (
        (None, {
            'fields': ('title', 'status', 'responsible_post', 'department', 'creator', 'due_date')
        }),
        ('Ideal Scene', {
            'fields': ('hierarchy_level', 'subgoal', 'plan', 'program', 'project', 'instruction')
        }),
        ('Recurrence', {
            'fields': (
                'is_recurring', 'recurrence_type', 'recurrence_interval',
                'recurrence_day_of_week', 'recurrence_day_of_month',
                'recurrence_end_date', 'parent_recurring_task', 'occurrence_date',
            ),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_updated_at', 'completed_at'),
            'classes': ('collapse',),
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related(
            'responsible_post', 'department', 'creator'
        )


@admin.register(CompletionReport)
class CompletionReportAdmin(admin.ModelAdmin):
    list_display = ('task', 'evidence_type', 'submitted_by', 'when_done', 'created_at')
    list_filter = ('evidence_type',)
    search_fields = ('task__title', 'what_was_done')

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('task', 'submitted_by')
