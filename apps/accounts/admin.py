"""
Admin configuration for accounts app.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User, Invitation
from .services import deactivate_user


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    User admin with email authentication and role management.
    """

    list_display = (
        'email', 'name', 'role', 'is_active', 'is_pending',
        'is_locked_display', 'created_at'
    )
    list_filter = ('role', 'is_active', 'is_pending', 'is_staff')
    search_fields = ('email', 'name')
    ordering = ('name',)
    list_per_page = 25

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('Personal Info'), {'fields': ('name', 'avatar_url')}),
        (_('Organization'), {'fields': ('role', 'is_pending')}),
        (_('Directory'), {
            'fields': ('microsoft_id', 'token_expires_at'),
            'classes': ('collapse',),
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Security'), {
            'fields': ('failed_login_attempts', 'locked_until'),
        }),
        (_('Important dates'), {
            'fields': ('last_login', 'created_at', 'updated_at'),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'name', 'password1', 'password2', 'role'),
        }),
    )

    readonly_fields = ('created_at', 'updated_at', 'last_login')

    actions = ['unlock_accounts', 'deactivate_users']

    @admin.display(boolean=True, description='Locked')
    def is_locked_display(self, obj):
        return obj.is_locked()

    @admin.action(description='Unlock selected accounts')
    def unlock_accounts(self, request, queryset):
        count = 0
        for user in queryset:
            if user.is_locked() or user.failed_login_attempts:
                user.unlock_account()
                count += 1
        self.message_user(request, f'{count} account(s) unlocked.')

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        count = 0
        for user in queryset.filter(is_active=True).exclude(pk=request.user.pk):
            deactivate_user(user)
            count += 1
        self.message_user(request, f'{count} user(s) deactivated.')


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ('email', 'role', 'invited_by', 'expires_at', 'accepted_at', 'created_at')
    list_filter = ('role',)
    search_fields = ('email',)
    readonly_fields = ('token', 'created_at')

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('invited_by')
