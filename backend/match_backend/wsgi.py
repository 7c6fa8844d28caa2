"""WSGI entrypoint (HTTP only; live notifications need the ASGI app)."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "match_backend.settings.settings")

application = get_wsgi_application()
