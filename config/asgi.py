"""
ASGI config for the Rate Manager project.

The calendar and submission endpoints are async views.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

application = get_asgi_application()
