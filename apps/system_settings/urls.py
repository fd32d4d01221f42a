"""
URL configuration for system_settings app.
"""

from django.urls import path
from . import views

app_name = 'system_settings'

urlpatterns = [
    path('settings', views.setting_list_view, name='setting_list'),
    path('settings/<str:key>', views.setting_detail_view, name='setting_detail'),
]
