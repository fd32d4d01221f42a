"""
Service layer for system_settings app.

Services:
- get_setting / put_setting (create-on-missing)
- get_stalled_threshold_days / get_overload_threshold: typed readers
"""

import logging

from django.core.exceptions import ValidationError

from apps.core.parsing import clean_text
from .models import Setting

logger = logging.getLogger(__name__)

STALLED_THRESHOLD_KEY = 'stalled_threshold_days'
OVERLOAD_THRESHOLD_KEY = 'overload_threshold'

DEFAULT_STALLED_THRESHOLD_DAYS = 3
DEFAULT_OVERLOAD_THRESHOLD = 10


def get_setting(key):
    return Setting.objects.filter(pk=key).first()


def put_setting(key, value):
    """
    Store a value under key, creating the row when it does not exist.

    Returns:
        (Setting, created)
    """
    key = clean_text(key)
    if not key:
        raise ValidationError('Setting key is required.')
    if value is None:
        raise ValidationError('value is required.')

    setting, created = Setting.objects.update_or_create(key=key, defaults={'value': value})
    logger.info(f'Setting {"created" if created else "updated"}: {key}')
    return setting, created


def _read_number(key, wrapper_keys, default):
    """
    Accept a bare number or {"<wrapper key>": n}; anything else gives default.
    """
    setting = get_setting(key)
    if setting is None:
        return default

    value = setting.value
    if isinstance(value, dict):
        value = next((value[name] for name in wrapper_keys if name in value), None)
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        logger.warning(f'Ignoring malformed setting {key}={setting.value!r}')
        return default
    return number if number >= 0 else default


def get_stalled_threshold_days():
    return _read_number(STALLED_THRESHOLD_KEY, ('days',), DEFAULT_STALLED_THRESHOLD_DAYS)


def get_overload_threshold():
    return _read_number(OVERLOAD_THRESHOLD_KEY, ('tasks', 'count'), DEFAULT_OVERLOAD_THRESHOLD)
