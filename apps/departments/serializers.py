from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from .models import Department, Post


class PostSerializer(serializers.ModelSerializer):
    departmentId = serializers.IntegerField(source='department_id', read_only=True)
    userId = serializers.IntegerField(source='user_id', read_only=True)
    user = UserSummarySerializer(read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    isVacant = serializers.BooleanField(source='is_vacant', read_only=True)

    class Meta:
        model = Post
        fields = [
            'id', 'name', 'description', 'departmentId',
            'userId', 'user', 'isActive', 'isVacant',
        ]


class PostReferenceSerializer(serializers.ModelSerializer):
    """Post as embedded in tasks and hierarchy items."""

    userId = serializers.IntegerField(source='user_id', read_only=True)
    userName = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = ['id', 'name', 'userId', 'userName']

    def get_userName(self, obj):
        return obj.user.name if obj.user_id else None


class DepartmentSerializer(serializers.ModelSerializer):
    sortOrder = serializers.IntegerField(source='sort_order', read_only=True)
    departmentHeadId = serializers.IntegerField(source='head_id', read_only=True)
    head = UserSummarySerializer(read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    deletedAt = serializers.DateTimeField(source='deleted_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    posts = serializers.SerializerMethodField()

    class Meta:
        model = Department
        fields = [
            'id', 'name', 'description', 'sortOrder', 'departmentHeadId', 'head',
            'isActive', 'deletedAt', 'posts', 'createdAt',
        ]

    def get_posts(self, obj):
        posts = [post for post in obj.posts.all() if post.is_active]
        return PostSerializer(posts, many=True).data
