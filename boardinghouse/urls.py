"""
URL configuration for the Boarding House management backend.
"""
from django.contrib import admin
from django.conf import settings
from django.urls import path, include

urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),
    path('api/auth/', include('apps.accounts.urls', namespace='accounts')),
    path('api/payments/', include('apps.payments.urls', namespace='payments')),
    path('api/owner/', include('apps.owners.urls', namespace='owners')),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    import debug_toolbar
    urlpatterns = [path('__debug__/', include(debug_toolbar.urls))] + urlpatterns
