"""
Settings Module
===============

Site settings document: defaults, typed merge, live store and the public
read API (JSON snapshot + Server-Sent Events stream).
"""

from flask import Blueprint

from .defaults import DEFAULT_SETTINGS, STATIC_PROJECTS
from .schema import SiteSettings, ExperienceEntry, EducationEntry, KNOWN_KEYS, merge_settings
from .store import SettingsStore

settings_bp = Blueprint('settings', __name__, url_prefix='/api')

from . import routes

__all__ = [
    'settings_bp', 'SettingsStore', 'SiteSettings', 'ExperienceEntry', 'EducationEntry',
    'KNOWN_KEYS', 'merge_settings', 'DEFAULT_SETTINGS', 'STATIC_PROJECTS',
]
