"""
Dashboard Module
================

Admin dashboard for the portfolio site.

Provides:
- Admin authentication (login/logout) through a pluggable auth provider
- The multi-section settings editor and its JSON API
- Recent application logs and Cloudinary upload signing
"""

from flask import Blueprint

# Note: Blueprint name is 'admin' so url_for('admin.login') reads naturally
dashboard_bp = Blueprint(
    'admin',
    __name__,
    url_prefix='/admin',
    template_folder='templates',
)

from . import routes

from .auth import AuthProvider, AdminTableAuth, FirebaseAuth
from .editor import AdminEditor, SECTIONS, SECTION_KEYS
from .registry import AdminRegistry, AdminEntry
from .session import AdminSession, SessionState

__all__ = [
    'dashboard_bp', 'AuthProvider', 'AdminTableAuth', 'FirebaseAuth', 'AdminEditor',
    'SECTIONS', 'SECTION_KEYS', 'AdminRegistry', 'AdminEntry', 'AdminSession', 'SessionState',
]
