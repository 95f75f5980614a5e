"""Top-level package for Django configuration.

The booking pipeline uses Django for settings, logging configuration and
DRF serializers only; there is no web server entry point.
"""

import os


def setup(settings_module: str = "config.settings.dev") -> None:
    """Configure Django for scripts and workers that use the pipeline."""
    import django

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", settings_module)
    django.setup()
