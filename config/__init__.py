"""
Config module - Default settings for the exporter.
"""

from .settings import DEFAULT_SETTINGS

__all__ = [
    'DEFAULT_SETTINGS',
]
