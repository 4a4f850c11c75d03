# core/templatetags/oligowatch_tags.py
"""
Display helpers for rows that arrive from the backend as plain dictionaries
(timestamps are ISO strings, not datetimes).
"""

from datetime import date, datetime

from django import template
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

register = template.Library()


@register.filter
def timestamp(value, empty='Never'):
    """Format an ISO timestamp as 'Jan 05, 2025, 14:03'."""
    if not value:
        return empty
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed is None:
            return value
        value = parsed
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime('%b %d, %Y, %H:%M')
    return str(value)


@register.filter
def day(value):
    """Format an ISO date (or timestamp) as 'Jan 05, 2025'."""
    if not value:
        return ''
    if isinstance(value, str):
        parsed = parse_date(value[:10])
        if parsed is None:
            return value
        value = parsed
    if isinstance(value, (date, datetime)):
        return value.strftime('%b %d, %Y')
    return str(value)


@register.filter
def truncate_sequence(value, max_length=50):
    value = value or ''
    max_length = int(max_length)
    if len(value) <= max_length:
        return value
    return f'{value[:max_length]}...'


@register.filter
def get_item(mapping, key):
    if not mapping:
        return None
    return mapping.get(key)
