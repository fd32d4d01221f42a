from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from apps.departments.serializers import PostReferenceSerializer
from .models import Policy


class PolicySerializer(serializers.ModelSerializer):
    createdById = serializers.IntegerField(source='created_by_id', read_only=True)
    createdBy = UserSummarySerializer(source='created_by', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Policy
        fields = [
            'id', 'title', 'content', 'scope', 'createdById', 'createdBy',
            'isActive', 'createdAt', 'updatedAt',
        ]


class PolicyDetailSerializer(PolicySerializer):
    """Policy with the posts and departments it covers."""

    posts = PostReferenceSerializer(many=True, read_only=True)
    departments = serializers.SerializerMethodField()

    class Meta(PolicySerializer.Meta):
        fields = PolicySerializer.Meta.fields + ['posts', 'departments']

    def get_departments(self, obj):
        return [{'id': department.pk, 'name': department.name} for department in obj.departments.all()]
