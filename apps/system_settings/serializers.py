from rest_framework import serializers

from .models import Setting


class SettingSerializer(serializers.ModelSerializer):
    value = serializers.JSONField(read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Setting
        fields = ['key', 'value', 'updatedAt']
