"""
Folio Modules
=============

Flask blueprint modules for the portfolio site and its admin panel.
"""

__all__ = ['dashboard', 'projects', 'settings', 'site']
