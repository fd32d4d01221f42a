"""
URL configuration for accounts app.

Includes:
- Session authentication
- User management
- Invitations
"""

from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Authentication
    path('auth/login', views.login_view, name='login'),
    path('auth/logout', views.logout_view, name='logout'),
    path('auth/me', views.me_view, name='me'),

    # User Management
    path('users', views.user_list_view, name='user_list'),
    path('users/<int:pk>/name', views.user_rename_view, name='user_rename'),
    path('users/<int:pk>', views.user_deactivate_view, name='user_deactivate'),

    # Invitations
    path('invitations', views.invitation_list_view, name='invitation_list'),
    path('invitations/validate/<uuid:token>', views.invitation_validate_view, name='invitation_validate'),
    path('invitations/accept/<uuid:token>', views.invitation_accept_view, name='invitation_accept'),
    path('invitations/<int:pk>', views.invitation_delete_view, name='invitation_delete'),
]
