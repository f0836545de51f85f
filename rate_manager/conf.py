"""
App settings for the rate manager.

Values come from ``settings.RATE_MANAGER`` (a dict) and fall back to
the defaults below:

    RATE_MANAGER = {
        'CALENDAR_DAYS': 365,
        'PMS_API_URL': 'https://api.cloudbeds.com/api/v1.3',
    }
"""

from django.conf import settings


DEFAULTS = {
    # Calendar assembly
    'CALENDAR_DAYS': 365,
    'DEFAULT_PICKUP_WINDOW': 1,
    'FEED_TIMEOUT_SECONDS': 30,
    
    # Submission
    'SUBMISSION_CHUNK_SIZE': 30,
    
    # PMS rate API
    'PMS_API_URL': 'https://api.cloudbeds.com/api/v1.3',
    'PMS_TOKEN_URL': 'https://hotels.cloudbeds.com/api/v1.1/access_token',
    'PMS_CLIENT_ID': '',
    'PMS_CLIENT_SECRET': '',
    'PMS_REFRESH_TOKEN': '',
    'PMS_TIMEOUT_SECONDS': 60,
}


def get_setting(name):
    """Return a rate manager setting, falling back to its default."""
    if name not in DEFAULTS:
        raise KeyError(f"Unknown rate manager setting: {name}")
    overrides = getattr(settings, 'RATE_MANAGER', {}) or {}
    return overrides.get(name, DEFAULTS[name])
