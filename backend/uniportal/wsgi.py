"""WSGI config for the uniportal project."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "uniportal.settings")

application = get_wsgi_application()
