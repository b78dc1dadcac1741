"""
WSGI config for the Boarding House management backend.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'boardinghouse.settings.production')

application = get_wsgi_application()
