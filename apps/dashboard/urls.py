"""
URL configuration for dashboard app.
"""

from django.urls import path
from . import views

app_name = 'dashboard'

urlpatterns = [
    path('dashboard/summary', views.summary_view, name='summary'),
    path('dashboard/grid', views.grid_view, name='grid'),
    path('dashboard/user-tasks/<int:user_id>', views.user_tasks_view, name='user_tasks'),
    path('dashboard/by-department', views.by_department_view, name='by_department'),
]
