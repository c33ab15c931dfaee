"""
Dashboard Helpers
=================

Request helpers shared by the dashboard and projects admin routes.
"""

import uuid
from functools import wraps

from flask import g, jsonify, request, session

from ...core.context import current_folio
from ...core.errors import ValidationError


def current_entry():
    """AdminEntry for the request's admin token, or None"""
    return current_folio().admin_registry.get(session.get('admin_token'))


def admin_required(f):
    """JSON endpoints: 401 unless signed in; exposes the editor as g.editor"""
    @wraps(f)
    def decorated(*args, **kwargs):
        entry = current_entry()
        if entry is None or not entry.session.is_signed_in:
            return jsonify({'success': False, 'error': 'Authentication required'}), 401
        g.admin = entry
        g.editor = entry.get_editor()
        return f(*args, **kwargs)
    return decorated


def editor_response(ok, message=None, status_code=None):
    """Standard admin API answer: {success, message, editor}"""
    editor = g.editor
    body = {
        'success': bool(ok),
        'message': message if message is not None else editor.status,
        'editor': editor.state(),
    }
    return jsonify(body), status_code or (200 if ok else 400)


def json_body():
    return request.get_json(silent=True) or {}


def read_upload(field='image'):
    """(bytes, unique filename) from a multipart upload; raises ValidationError"""
    file = request.files.get(field)
    if file is None:
        raise ValidationError('No image file provided')
    if not file.filename or '.' not in file.filename:
        raise ValidationError('No file selected')

    file_ext = file.filename.rsplit('.', 1)[1].lower()
    return file.read(), f"{uuid.uuid4().hex}.{file_ext}"
