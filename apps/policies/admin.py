"""
Admin configuration for policies app.
"""

from django.contrib import admin
from .models import Policy, PolicyPost, PolicyDepartment


class PolicyPostInline(admin.TabularInline):
    model = PolicyPost
    extra = 0


class PolicyDepartmentInline(admin.TabularInline):
    model = PolicyDepartment
    extra = 0


@admin.register(Policy)
class PolicyAdmin(admin.ModelAdmin):
    list_display = ('title', 'scope', 'created_by', 'is_active', 'created_at')
    list_filter = ('scope', 'is_active')
    search_fields = ('title', 'content')
    inlines = [PolicyPostInline, PolicyDepartmentInline]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('created_by')
