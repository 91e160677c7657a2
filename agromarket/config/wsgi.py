"""
WSGI config for the agromarket project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'agromarket.config.settings')

application = get_wsgi_application()
