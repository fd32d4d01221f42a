"""
URL configuration for hierarchy app.
"""

from django.urls import path
from . import views

app_name = 'hierarchy'

urlpatterns = [
    path('main-goal', views.main_goal_view, name='main_goal'),
    path('ideal-scene', views.ideal_scene_view, name='tree'),
    path('ideal-scene/<str:item_type>', views.item_list_view, name='item_list'),
    path('ideal-scene/<str:item_type>/<int:pk>', views.item_detail_view, name='item_detail'),
    path('ideal-scene/<str:item_type>/<int:pk>/owner', views.item_owner_view, name='item_owner'),
]
