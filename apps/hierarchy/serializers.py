from rest_framework import serializers

from apps.departments.serializers import PostReferenceSerializer
from .models import MainGoal


class MainGoalSerializer(serializers.ModelSerializer):
    idealSceneContent = serializers.CharField(source='ideal_scene_content', read_only=True)
    departmentId = serializers.IntegerField(source='department_id', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = MainGoal
        fields = [
            'id', 'title', 'description', 'idealSceneContent', 'departmentId',
            'isActive', 'createdAt', 'updatedAt',
        ]


class HierarchyItemSerializer(serializers.Serializer):
    """Any of the five levels; the fields are shared."""

    id = serializers.IntegerField(read_only=True)
    level = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    parentId = serializers.IntegerField(source='parent_id', read_only=True)
    departmentId = serializers.IntegerField(source='department_id', read_only=True)
    assignedPostId = serializers.IntegerField(source='assigned_post_id', read_only=True)
    assignedPost = PostReferenceSerializer(source='assigned_post', read_only=True)
    dueDate = serializers.DateTimeField(source='due_date', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
