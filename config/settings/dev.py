"""Development settings.

Debug logging and a local booking backend. Do not use these settings in
production!
"""

from .base import *  # noqa: F401,F403

DEBUG = True

LOGGING["handlers"]["console"]["level"] = "DEBUG"  # noqa: F405
LOGGING["loggers"]["apps"]["level"] = "DEBUG"  # noqa: F405
