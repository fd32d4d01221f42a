"""
Admin configuration for activity_log app.

Entries are written by the task services and the recurring job only, so the
admin is a read-only audit view.
"""

from django.contrib import admin
from .models import TaskActivity


class ActorFilter(admin.SimpleListFilter):
    title = 'actor'
    parameter_name = 'actor'

    def lookups(self, request, model_admin):
        return (('user', 'A user'), ('system', 'Scheduled job'))

    def queryset(self, request, queryset):
        if self.value() == 'user':
            return queryset.filter(user__isnull=False)
        if self.value() == 'system':
            return queryset.filter(user__isnull=True)
        return queryset


@admin.register(TaskActivity)
class TaskActivityAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'task_link', 'action_type', 'actor', 'field_name', 'summary')
    list_filter = ('action_type', ActorFilter)
    list_select_related = ('task', 'user')
    search_fields = ('task__title', 'description', 'user__email', 'user__name')
    date_hierarchy = 'created_at'
    readonly_fields = [field.name for field in TaskActivity._meta.fields]

    @admin.display(description='Task', ordering='task_id')
    def task_link(self, obj):
        return f'#{obj.task_id} {obj.task.title}'

    @admin.display(description='By')
    def actor(self, obj):
        return obj.user.name if obj.user_id else 'system'

    @admin.display(description='Description')
    def summary(self, obj):
        text = obj.description
        return text if len(text) <= 80 else f'{text[:77]}...'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
