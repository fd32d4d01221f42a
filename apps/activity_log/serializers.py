from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from .models import TaskActivity


class TaskActivitySerializer(serializers.ModelSerializer):
    taskId = serializers.IntegerField(source='task_id', read_only=True)
    actionType = serializers.CharField(source='action_type', read_only=True)
    fieldName = serializers.CharField(source='field_name', read_only=True)
    oldValue = serializers.CharField(source='old_value', read_only=True)
    newValue = serializers.CharField(source='new_value', read_only=True)
    user = UserSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = TaskActivity
        fields = [
            'id', 'taskId', 'actionType', 'description',
            'fieldName', 'oldValue', 'newValue', 'user', 'createdAt',
        ]
