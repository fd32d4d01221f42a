"""
Views for system_settings app. Readable by anyone signed in; CEO and executives write.
"""

from django.http import Http404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.accounts.permissions import IsExecutiveOrReadOnly
from .models import Setting
from .serializers import SettingSerializer
from .services import get_setting, put_setting


@api_view(['GET'])
@permission_classes([IsExecutiveOrReadOnly])
def setting_list_view(request):
    return Response(SettingSerializer(Setting.objects.all(), many=True).data)


@api_view(['GET', 'PUT'])
@permission_classes([IsExecutiveOrReadOnly])
def setting_detail_view(request, key):
    if request.method == 'PUT':
        setting, _ = put_setting(key, request.data.get('value'))
        return Response(SettingSerializer(setting).data)

    setting = get_setting(key)
    if setting is None:
        raise Http404('Setting not found')
    return Response(SettingSerializer(setting).data)
