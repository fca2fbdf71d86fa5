from datetime import datetime
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context

DEFAULT_TIMEZONE = "Asia/Manila"


def app_timezone():
    """ZoneInfo for the running app's TIMEZONE, or the barangay default."""
    if has_app_context():
        return ZoneInfo(current_app.config.get("TIMEZONE") or DEFAULT_TIMEZONE)
    return ZoneInfo(DEFAULT_TIMEZONE)


def local_now(tz_name=None):
    """Current wall-clock time in the barangay's timezone, as a naive datetime."""
    return datetime.now(ZoneInfo(tz_name or DEFAULT_TIMEZONE)).replace(tzinfo=None)


def app_now():
    """Current naive wall-clock time in app_timezone()."""
    return datetime.now(app_timezone()).replace(tzinfo=None)
