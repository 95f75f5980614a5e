"""Test settings.

Fixed pipeline configuration so tests do not depend on the developer's
`.env`.
"""

from .base import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

BOOKING_API_BASE_URL = 'http://booking.test/api/v1'
BOOKING_API_TOKEN = 'test-token'
BOOKING_API_TIMEOUT = 5

PAYMENT_POLL_INTERVAL_SECONDS = 2
PAYMENT_POLL_CEILING_SECONDS = 60
PAYMENT_SETTLEMENT_CURRENCY = 'VND'
PAYMENT_EXCHANGE_RATES = {'USD': 25000}

DEFAULT_RATE_PLAN_CURRENCY = 'VND'
DEFAULT_TAX_RATE = '0.1'
DEFAULT_SERVICE_RATE = '0.05'
TABLE_BOOKING_BUFFER_MINUTES = 30
