"""
Configuration layer for pdfdoc.

All settings live in a single Django setting, ``PDFDOC``, merged over the
defaults below:

    PDFDOC = {
        'SHOW_WARNINGS': False,
        'CONVERT_ENTITIES': True,
        'SHAPE_RTL': True,
        'DISK': None,
        'ENGINE': 'pdfdoc.weasyprint_engine.WeasyPrintEngine',
        'OPTIONS': {'paper_size': 'a4', 'orientation': 'portrait'},
    }

Settings are read on every call so that ``override_settings`` works in
tests without any cache invalidation.
"""

from typing import Any, Optional

from django.conf import settings


SETTINGS_NAME = "PDFDOC"

DEFAULT_OPTIONS = {
    'paper_size': 'a4',
    'orientation': 'portrait',
    'base_url': None,
    'stylesheets': [],
    'presentational_hints': False,
    'media_type': 'print',
    'pdf_backend': 'pypdf',
}

DEFAULTS = {
    'SHOW_WARNINGS': False,
    'CONVERT_ENTITIES': True,
    'SHAPE_RTL': True,
    'DISK': None,
    'ENGINE': 'pdfdoc.weasyprint_engine.WeasyPrintEngine',
    'OPTIONS': DEFAULT_OPTIONS,
}


def get_pdf_settings() -> dict:
    """
    Get the effective pdfdoc settings.

    Returns:
        Dictionary with DEFAULTS overlaid by ``settings.PDFDOC``
    """
    configured = getattr(settings, SETTINGS_NAME, None) or {}
    merged = dict(DEFAULTS)
    merged.update(configured)
    return merged


def get_setting(name: str, default: Optional[Any] = None) -> Any:
    """
    Get a single pdfdoc setting.

    Example:
        >>> get_setting('SHOW_WARNINGS')
        False
    """
    return get_pdf_settings().get(name, default)


def get_default_options() -> dict:
    """
    Get the default engine options.

    Configured ``OPTIONS`` are merged over DEFAULT_OPTIONS, so a project
    only needs to list the options it changes.
    """
    options = dict(DEFAULT_OPTIONS)
    options.update(get_setting('OPTIONS') or {})
    # Lists must not be shared between documents
    options['stylesheets'] = list(options.get('stylesheets') or [])
    return options


# Toggles
def is_show_warnings_enabled() -> bool:
    """Check if render warnings are escalated to RenderWarning."""
    return bool(get_setting('SHOW_WARNINGS'))


def is_convert_entities_enabled() -> bool:
    """Check if currency glyphs are replaced by named entities."""
    return get_setting('CONVERT_ENTITIES') is not False


def is_shape_rtl_enabled() -> bool:
    """Check if right-to-left runs are reshaped before rendering."""
    return get_setting('SHAPE_RTL') is not False


def get_default_disk() -> Optional[str]:
    """Get the default storage alias, or None for plain filesystem paths."""
    return get_setting('DISK')
