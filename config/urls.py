"""
URL configuration for the ideal_scene project.

Every app exposes its JSON endpoints under /api/ without trailing slashes.
"""

from django.conf import settings
from django.contrib import admin
from django.urls import path, include

from .health import health

api_patterns = [
    path('health', health, name='health'),
    path('', include('apps.accounts.urls', namespace='accounts')),
    path('', include('apps.departments.urls', namespace='departments')),
    path('', include('apps.hierarchy.urls', namespace='hierarchy')),
    path('', include('apps.tasks.urls', namespace='tasks')),
    path('', include('apps.dashboard.urls', namespace='dashboard')),
    path('', include('apps.system_settings.urls', namespace='system_settings')),
    path('', include('apps.policies.urls', namespace='policies')),
]

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include(api_patterns)),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    import debug_toolbar
    urlpatterns = [
        path('__debug__/', include(debug_toolbar.urls)),
    ] + urlpatterns

# Admin site customization
admin.site.site_header = 'Ideal Scene Administration'
admin.site.site_title = 'Ideal Scene Admin'
admin.site.index_title = 'Welcome to Ideal Scene Admin'
