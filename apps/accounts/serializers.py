from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Invitation

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact user shape embedded in posts, departments and tasks."""

    avatarUrl = serializers.CharField(source='avatar_url', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'avatarUrl']


class UserSerializer(serializers.ModelSerializer):
    avatarUrl = serializers.CharField(source='avatar_url', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    isPending = serializers.BooleanField(source='is_pending', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    posts = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'email', 'name', 'role', 'avatarUrl',
            'isActive', 'isPending', 'posts', 'createdAt',
        ]

    def get_posts(self, obj):
        return [
            {'id': post.id, 'name': post.name, 'departmentId': post.department_id}
            for post in obj.posts.all()
            if post.is_active
        ]


class InvitationSerializer(serializers.ModelSerializer):
    invitedBy = UserSummarySerializer(source='invited_by', read_only=True)
    expiresAt = serializers.DateTimeField(source='expires_at', read_only=True)
    acceptedAt = serializers.DateTimeField(source='accepted_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    inviteUrl = serializers.CharField(source='invite_url', read_only=True)

    class Meta:
        model = Invitation
        fields = [
            'id', 'email', 'role', 'token', 'invitedBy',
            'expiresAt', 'acceptedAt', 'createdAt', 'inviteUrl',
        ]
