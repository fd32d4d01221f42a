"""
Admin configuration for hierarchy app.
"""

from django.contrib import admin
from .models import MainGoal, Subgoal, Plan, Program, Project, Instruction


@admin.register(MainGoal)
class MainGoalAdmin(admin.ModelAdmin):
    list_display = ('title', 'department', 'is_active', 'updated_at')
    list_filter = ('is_active',)
    search_fields = ('title',)
    readonly_fields = ('created_at', 'updated_at')


class HierarchyItemAdmin(admin.ModelAdmin):
    """Shared admin for the five levels."""

    list_display = ('title', 'department', 'assigned_post', 'due_date', 'is_active')
    list_filter = ('is_active', 'department')
    search_fields = ('title', 'description')
    date_hierarchy = 'due_date'
    readonly_fields = ('created_at', 'updated_at')

    def get_queryset(self, request):
        return super().get_queryset(request).select_related(
            'department', 'assigned_post', self.model.parent_field
        )


for level_model in (Subgoal, Plan, Program, Project, Instruction):
    admin.site.register(level_model, HierarchyItemAdmin)
