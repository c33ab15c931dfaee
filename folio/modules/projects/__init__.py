"""
Projects Module
===============

Project records, the live projects list, and the admin project form.

Provides:
- Project model and slug derivation
- ProjectsStore (live list with static fallback)
- ProjectEditor and its admin JSON API under /admin/api/projects
"""

from flask import Blueprint

from .models import Project, slugify, parse_skills
from .store import ProjectsStore
from .editor import ProjectEditor

projects_bp = Blueprint(
    'projects_admin',
    __name__,
    url_prefix='/admin/api/projects',
)

from . import routes

__all__ = ['projects_bp', 'Project', 'ProjectsStore', 'ProjectEditor', 'slugify', 'parse_skills']
