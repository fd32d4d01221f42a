"""
Helpers for reading JSON request bodies.

Each helper raises ValidationError with a field-specific message, so views can
pass raw request data straight through to the service layer.
"""

from datetime import datetime, time

from django.core.exceptions import ValidationError
from django.http import Http404
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


def clean_text(value):
    """Trimmed string, or '' for anything that is not a string."""
    return value.strip() if isinstance(value, str) else ''


def parse_datetime_value(value, field, required=False):
    """
    Accept an ISO datetime or a plain ISO date (taken as midnight).

    Returns an aware datetime, or None when the value is empty and not required.
    """
    if value in (None, ''):
        if required:
            raise ValidationError(f'{field} is required.')
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = parse_datetime(str(value))
            if parsed is None:
                day = parse_date(str(value))
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            parsed = None

    if parsed is None:
        raise ValidationError(f'{field} must be an ISO date or datetime.')

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def parse_id(value, field, required=True):
    """Primary keys arrive as numbers or numeric strings."""
    if value in (None, ''):
        if required:
            raise ValidationError(f'{field} is required.')
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer id.')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer id.')


def parse_id_list(value, field):
    if not isinstance(value, list):
        raise ValidationError(f'{field} array is required.')
    return [parse_id(item, field) for item in value]


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def get_or_404(model, **lookup):
    """Like get_object_or_404, with a readable "<Model> not found" message."""
    try:
        return model.objects.get(**lookup)
    except model.DoesNotExist:
        raise Http404(f'{model._meta.verbose_name.capitalize()} not found')
