"""
URL configuration for tasks app.
"""

from django.urls import path
from . import views

app_name = 'tasks'

urlpatterns = [
    path('tasks', views.task_list_view, name='task_list'),
    path('tasks/<int:pk>', views.task_detail_view, name='task_detail'),
    path('tasks/<int:pk>/status', views.task_status_view, name='task_status'),
    path('tasks/<int:pk>/completion-report', views.completion_report_view, name='completion_report'),
    path('tasks/<int:pk>/complete', views.task_complete_view, name='task_complete'),
    path('tasks/<int:pk>/activity', views.task_activity_view, name='task_activity'),
]
