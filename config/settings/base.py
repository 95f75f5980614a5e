"""Base settings for all environments.

Common configuration: the booking API connection, payment polling window,
pricing defaults and structured logging. Values come from the environment,
optionally loaded from a `.env` file at the project root.
"""

import json
import os
from pathlib import Path

import structlog
from django.core.exceptions import ImproperlyConfigured
from dotenv import load_dotenv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(BASE_DIR / ".env")


def get_env(var_name: str, default=None, required: bool = False):
    value = os.environ.get(var_name, default)
    if required and value in (None, ""):
        raise ImproperlyConfigured(f"Missing required environment variable: {var_name}")
    return value


def get_json_env(var_name: str, default):
    raw = os.environ.get(var_name)
    if not raw:
        return default
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ImproperlyConfigured(f"{var_name} must be valid JSON: {e}") from e


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = get_env('DJANGO_SECRET_KEY', 'replace-me-in-production')

DEBUG = False

ALLOWED_HOSTS: list[str] = []

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    # Third‑party apps
    'rest_framework',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

# Internationalization
LANGUAGE_CODE = 'en-us'

TIME_ZONE = get_env('TIME_ZONE', 'Asia/Ho_Chi_Minh')

USE_I18N = True

USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Booking backend
BOOKING_API_BASE_URL = get_env('BOOKING_API_BASE_URL', 'http://localhost:4000/api/v1')
BOOKING_API_TOKEN = get_env('BOOKING_API_TOKEN', '')
BOOKING_API_TIMEOUT = float(get_env('BOOKING_API_TIMEOUT', '10'))

# Payment settlement: poll every 2 s, give up after 60 s
PAYMENT_POLL_INTERVAL_SECONDS = float(get_env('PAYMENT_POLL_INTERVAL_SECONDS', '2'))
PAYMENT_POLL_CEILING_SECONDS = float(get_env('PAYMENT_POLL_CEILING_SECONDS', '60'))
PAYMENT_SETTLEMENT_CURRENCY = get_env('PAYMENT_SETTLEMENT_CURRENCY', 'VND')
# Settlement currency units per unit of the key currency, e.g. {"USD": 25000}
PAYMENT_EXCHANGE_RATES = get_json_env('PAYMENT_EXCHANGE_RATES', {})

# Pricing
DEFAULT_RATE_PLAN_CURRENCY = get_env('DEFAULT_RATE_PLAN_CURRENCY', 'VND')
DEFAULT_TAX_RATE = get_env('DEFAULT_TAX_RATE', '0.1')
DEFAULT_SERVICE_RATE = get_env('DEFAULT_SERVICE_RATE', '0.05')

# Table bookings may not start sooner than this from now
TABLE_BOOKING_BUFFER_MINUTES = int(get_env('TABLE_BOOKING_BUFFER_MINUTES', '30'))

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

LOG_LEVEL = get_env('LOG_LEVEL', 'INFO')

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "structlog.stdlib.ProcessorFormatter",
            "processor": structlog.processors.JSONRenderer(),
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "level": LOG_LEVEL,
        }
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "apps": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "shared": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "apps.payments": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}
