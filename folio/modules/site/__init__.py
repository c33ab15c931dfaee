"""
Site Module
===========

Public pages rendered from the live settings and project snapshots, plus the
public projects API.
"""

from .routes import site_bp, format_content

__all__ = ['site_bp', 'format_content']
