"""
URL configuration for departments app.
"""

from django.urls import path
from . import views

app_name = 'departments'

urlpatterns = [
    path('departments', views.department_list_view, name='list'),
    path('departments/<int:pk>', views.department_detail_view, name='detail'),
    path('departments/<int:pk>/head', views.department_head_view, name='head'),
    path('departments/<int:pk>/posts', views.department_posts_view, name='posts'),
    path('posts', views.post_create_view, name='post_create'),
    path('posts/<int:pk>', views.post_detail_view, name='post_detail'),
]
