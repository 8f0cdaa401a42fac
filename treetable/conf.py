"""
Settings for treetable, read from the ``TREETABLE`` Django setting::

    TREETABLE = {
        "LOAD_MODE": "sync",
        "PATH_DELIMITER": ",",
    }

Keys that are not given fall back to :data:`DEFAULTS`.
"""

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from treetable.types import LoadMode

DEFAULTS = {
    "LOAD_MODE": "async",
    "PATH_DELIMITER": "/",
    "DEFAULT_ORDER": "sort_id",
    "OPERATION_PARAM": "operation",
    "PAGE_SIZE": 20,
    "MAX_PAGE_SIZE": 1000,
}


def get_setting(name):
    """
    :returns: the configured value of ``name``, or its default.

    :raise ImproperlyConfigured: for unknown names, or when ``TREETABLE``
        contains keys that treetable does not know about
    """
    if name not in DEFAULTS:
        raise ImproperlyConfigured(f"Unknown treetable setting: {name}")
    user_settings = getattr(settings, "TREETABLE", None) or {}
    unknown = set(user_settings) - set(DEFAULTS)
    if unknown:
        raise ImproperlyConfigured("Unknown keys in TREETABLE setting: %s" % ", ".join(sorted(unknown)))
    return user_settings.get(name, DEFAULTS[name])


def get_load_mode():
    try:
        return LoadMode.coerce(get_setting("LOAD_MODE"))
    except ValueError as exc:
        raise ImproperlyConfigured(f"TREETABLE['LOAD_MODE']: {exc}") from exc


def get_path_delimiter():
    delimiter = get_setting("PATH_DELIMITER")
    if not isinstance(delimiter, str) or not delimiter:
        raise ImproperlyConfigured("TREETABLE['PATH_DELIMITER'] must be a non-empty string")
    return delimiter


def get_page_size_limits():
    """:returns: a ``(default, maximum)`` tuple of page sizes."""
    page_size = get_setting("PAGE_SIZE")
    max_page_size = get_setting("MAX_PAGE_SIZE")
    if not (isinstance(page_size, int) and isinstance(max_page_size, int)) or not 0 < page_size <= max_page_size:
        raise ImproperlyConfigured("TREETABLE page sizes must satisfy 0 < PAGE_SIZE <= MAX_PAGE_SIZE")
    return page_size, max_page_size
