"""
Settings Store
==============

Live, always-defined SiteSettings mirror of the settings document.
"""

from ...core.live import LiveStore
from .defaults import DEFAULT_SETTINGS
from .schema import merge_settings


class SettingsStore(LiveStore):
    """Merges each pushed settings document over the defaults and republishes it"""

    source = 'settings'

    def __init__(self, document_store, defaults=None, path='settings'):
        self.defaults = DEFAULT_SETTINGS if defaults is None else defaults
        super().__init__(document_store, path, merge_settings({}, self.defaults))

    def _transform(self, raw):
        return merge_settings(raw or {}, self.defaults)
