"""
Admin configuration for departments app.
"""

from django.contrib import admin
from .models import Department, Post


class PostInline(admin.TabularInline):
    model = Post
    extra = 0
    fields = ('name', 'user', 'is_active')
    autocomplete_fields = ('user',)


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    """Admin for Department model."""

    list_display = ('name', 'sort_order', 'head', 'is_active', 'deleted_at', 'created_at')
    list_filter = ('is_active',)
    search_fields = ('name',)
    ordering = ('sort_order', 'name')
    inlines = [PostInline]

    readonly_fields = ('created_at', 'updated_at', 'deleted_at')

    fieldsets = (
        (None, {
            'fields': ('name', 'description', 'sort_order', 'head', 'is_active')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'deleted_at'),
            'classes': ('collapse',),
        }),
    )

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('head')


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('name', 'department', 'user', 'is_active')
    list_filter = ('is_active', 'department')
    search_fields = ('name', 'user__name', 'user__email')

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('department', 'user')
