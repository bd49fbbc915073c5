"""
ASGI config for the medrecords project (HTTP only).
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "medrecords.settings")

application = get_asgi_application()
