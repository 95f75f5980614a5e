"""Production settings.

Sensitive values must come from environment variables; the booking API
token is required.
"""

from .base import *  # noqa: F401,F403

# Never run with debug enabled in production
DEBUG = False

SECRET_KEY = get_env('DJANGO_SECRET_KEY', required=True)  # noqa: F405

BOOKING_API_BASE_URL = get_env('BOOKING_API_BASE_URL', required=True)  # noqa: F405
BOOKING_API_TOKEN = get_env('BOOKING_API_TOKEN', required=True)  # noqa: F405
