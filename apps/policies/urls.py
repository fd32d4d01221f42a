"""
URL configuration for policies app.
"""

from django.urls import path
from . import views

app_name = 'policies'

urlpatterns = [
    path('policies', views.policy_list_view, name='policy_list'),
    path('policies/<int:pk>', views.policy_detail_view, name='policy_detail'),
    path('policies/<int:pk>/posts', views.policy_posts_view, name='policy_posts'),
    path('policies/<int:pk>/posts/<int:post_id>', views.policy_post_remove_view, name='policy_post_remove'),
    path('policies/<int:pk>/departments', views.policy_departments_view, name='policy_departments'),
    path('posts/<int:pk>/policies', views.post_policies_view, name='post_policies'),
]
