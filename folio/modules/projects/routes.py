"""
Projects Admin Routes
=====================

JSON API for the project form in the admin editor. Every endpoint answers
{success, message, editor} with the full editor state.
"""

from flask import g

from . import projects_bp
from ..dashboard.helpers import admin_required, editor_response, json_body, read_upload
from ...core.context import current_folio
from ...core.errors import ValidationError


@projects_bp.route('/form', methods=['POST'])
@admin_required
def update_form():
    """Edit form fields: {"name": ..., "skills_text": ..., ...}"""
    try:
        g.editor.projects.update_fields(**json_body())
    except ValidationError as e:
        return editor_response(False, str(e))
    return editor_response(True, '')


@projects_bp.route('/images', methods=['POST'])
@admin_required
def add_image():
    """Add an image by URL"""
    ok = g.editor.projects.add_image(json_body().get('url'))
    return editor_response(ok, '' if ok else None)


@projects_bp.route('/images/upload', methods=['POST'])
@admin_required
def upload_image():
    """Upload image for the project being edited"""
    try:
        file_bytes, filename = read_upload()
    except ValidationError as e:
        return editor_response(False, str(e))
    url = g.editor.projects.upload_image(file_bytes, filename)
    return editor_response(url is not None)


@projects_bp.route('/images/<int:index>', methods=['DELETE'])
@admin_required
def remove_image(index):
    ok = g.editor.projects.remove_image(index)
    return editor_response(ok, '' if ok else None)


@projects_bp.route('/edit/<slug>', methods=['POST'])
@admin_required
def edit_project(slug):
    """Load a project from the live list into the form"""
    project = current_folio().projects_store.find(slug)
    if project is None:
        return editor_response(False, 'Project not found.', 404)
    g.editor.projects.edit(project)
    g.editor.select_tab('projects')
    return editor_response(True, '')


@projects_bp.route('/cancel', methods=['POST'])
@admin_required
def cancel_edit():
    g.editor.projects.cancel()
    return editor_response(True, '')


@projects_bp.route('/submit', methods=['POST'])
@admin_required
def submit_project():
    return editor_response(g.editor.projects.submit())


@projects_bp.route('/<slug>', methods=['DELETE'])
@projects_bp.route('/<slug>/delete', methods=['POST'])
@admin_required
def delete_project(slug):
    return editor_response(g.editor.projects.delete(slug))
