"""
Site Public Routes
==================

Home page, project detail pages and the public projects API.
"""

import re

from flask import Blueprint, jsonify, render_template
from flask_cors import cross_origin
from markupsafe import Markup, escape

from ...core.context import current_folio

site_bp = Blueprint('site', __name__, template_folder='templates')


def format_content(content):
    """Format content by converting line breaks to HTML and handling basic formatting"""
    if not content:
        return ""

    content = str(escape(content))
    content = re.sub(r'\n\s*\n', '</p><p>', content)
    content = re.sub(r'\n', '<br>', content)
    content = f'<p>{content}</p>'
    content = re.sub(r'<p>\s*</p>', '', content)
    content = re.sub(r'\*\*(.*?)\*\*', r'<strong>\1</strong>', content)
    content = re.sub(r'\*(.*?)\*', r'<em>\1</em>', content)
    content = re.sub(r'`(.*?)`', r'<code>\1</code>', content)

    return Markup(content)


@site_bp.app_template_filter('format_content')
def format_content_filter(content):
    return format_content(content)


# ===== Routes =====

@site_bp.route('/')
def home():
    """Single-page portfolio: hero, about, experience, education, projects."""
    folio = current_folio()
    return render_template(
        'site/home.html',
        settings=folio.settings_store.snapshot,
        projects=folio.projects_store.snapshot,
    )


@site_bp.route('/projects/<slug>')
def project_detail(slug):
    """Individual project page; live project first, then the static fallback."""
    folio = current_folio()
    project = folio.projects_store.resolve(slug)
    if project is None:
        return render_template('site/not_found.html', message='Project not found.'), 404

    return render_template(
        'site/project_detail.html',
        project=project,
        settings=folio.settings_store.snapshot,
    )


# ===== API Routes =====

@site_bp.route('/api/projects', methods=['GET'])
@cross_origin()
def get_projects():
    """Current projects list - public endpoint."""
    projects = current_folio().projects_store.snapshot
    return jsonify({'success': True, 'projects': [p.to_dict() for p in projects]})
