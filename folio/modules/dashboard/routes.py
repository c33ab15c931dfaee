"""
Admin Dashboard Routes
======================

Login/logout pages, the editor page, and the JSON API that drives every
AdminEditor operation. Project form endpoints live in the projects module.
"""

from flask import flash, g, jsonify, redirect, render_template, request, session, url_for

from . import dashboard_bp
from .helpers import admin_required, current_entry, editor_response, json_body, read_upload
from ...core.context import current_folio
from ...core.errors import ConfigurationError, ValidationError
from ...core.logging_service import LoggingService
from ...core.storage import is_cloud_storage, sign_upload_request


@dashboard_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Admin login route"""
    entry = current_entry()
    if entry is not None and entry.session.is_signed_in:
        return redirect(url_for('admin.dashboard'))

    if request.method == 'POST':
        email = request.form.get('email', '')
        password = request.form.get('password', '')

        registry = current_folio().admin_registry
        new_token = None
        if entry is None:
            new_token, entry = registry.create()

        if entry.session.sign_in(email, password):
            if new_token:
                session['admin_token'] = new_token
            session['admin_id'] = entry.session.user.get('uid')
            session['admin_email'] = entry.session.email
            flash('Login successful', 'success')

            next_page = request.args.get('next')
            return redirect(next_page or url_for('admin.dashboard'))

        flash(entry.session.error, 'error')
        # only signed-in logins keep a registry entry
        if new_token:
            registry.discard(new_token)

    return render_template('dashboard/login.html')


@dashboard_bp.route('/logout')
def logout():
    """Admin logout route"""
    token = session.pop('admin_token', None)
    if token:
        current_folio().admin_registry.discard(token)
    session.pop('admin_id', None)
    session.pop('admin_email', None)
    flash('You have been logged out', 'info')
    return redirect(url_for('admin.login'))


@dashboard_bp.route('/')
@dashboard_bp.route('/dashboard')
def dashboard():
    """The editor; only rendered while signed in"""
    entry = current_entry()
    if entry is None or not entry.session.is_signed_in:
        return redirect(url_for('admin.login', next=request.path))

    editor = entry.get_editor()
    return render_template(
        'dashboard/editor.html',
        editor=editor.state(),
        admin_email=entry.session.email,
        cloud_storage=is_cloud_storage(),
    )


@dashboard_bp.route('/status')
def status():
    """Check admin login status (API endpoint)"""
    entry = current_entry()
    if entry is not None and entry.session.is_signed_in:
        return jsonify({
            'logged_in': True,
            'admin_email': entry.session.email,
            'state': entry.session.state.value,
        })
    return jsonify({'logged_in': False}), 401


@dashboard_bp.route('/create-admin', methods=['GET', 'POST'])
def create_admin():
    """Create new admin (only accessible by a signed-in admin or if no admins exist)"""
    provider = current_folio().auth_provider
    if not hasattr(provider, 'create_admin'):
        flash('Admin accounts are managed by the sign-in provider', 'info')
        return redirect(url_for('admin.login'))

    entry = current_entry()
    signed_in = entry is not None and entry.session.is_signed_in
    if provider.admin_count() > 0 and not signed_in:
        return redirect(url_for('admin.login'))

    if request.method == 'POST':
        email = request.form.get('email', '')
        password = request.form.get('password', '')
        confirm_password = request.form.get('confirm_password', '')

        if password != confirm_password:
            flash('Passwords do not match', 'error')
            return render_template('dashboard/create_admin.html')

        try:
            provider.create_admin(email, password)
        except ValidationError as e:
            flash(str(e), 'error')
            return render_template('dashboard/create_admin.html')

        LoggingService.log_user_action('auth', 'Admin created', details={'email': email.strip().lower()})
        flash(f'Admin {email.strip().lower()} created successfully', 'success')
        return redirect(url_for('admin.dashboard' if signed_in else 'admin.login'))

    return render_template('dashboard/create_admin.html')


# ===== Editor API =====

def _apply(operation, *args):
    """Run a draft edit; validation problems become a 400 with the message"""
    try:
        operation(*args)
    except ValidationError as e:
        return editor_response(False, str(e))
    return editor_response(True, '')


@dashboard_bp.route('/api/editor', methods=['GET'])
@admin_required
def api_editor_state():
    return editor_response(True)


@dashboard_bp.route('/api/editor/tab', methods=['POST'])
@admin_required
def api_select_tab():
    return _apply(g.editor.select_tab, json_body().get('section'))


@dashboard_bp.route('/api/editor/<section>/field', methods=['POST'])
@admin_required
def api_update_field(section):
    data = json_body()
    return _apply(g.editor.update_field, section, data.get('field'), data.get('value'))


@dashboard_bp.route('/api/editor/<section>/save', methods=['POST'])
@admin_required
def api_save_section(section):
    try:
        ok = g.editor.save(section)
    except ValidationError as e:
        return editor_response(False, str(e))
    return editor_response(ok)


@dashboard_bp.route('/api/editor/<section>/entries', methods=['POST'])
@admin_required
def api_add_entry(section):
    return _apply(g.editor.add_entry, section)


@dashboard_bp.route('/api/editor/<section>/entries/<int:index>', methods=['POST'])
@admin_required
def api_update_entry(section, index):
    data = json_body()
    return _apply(g.editor.update_entry, section, index, data.get('field'), data.get('value', ''))


@dashboard_bp.route('/api/editor/<section>/entries/<int:index>', methods=['DELETE'])
@admin_required
def api_remove_entry(section, index):
    return _apply(g.editor.remove_entry, section, index)


@dashboard_bp.route('/api/editor/<section>/entries/<int:index>/items', methods=['POST'])
@admin_required
def api_add_list_item(section, index):
    return _apply(g.editor.add_list_item, section, index)


@dashboard_bp.route('/api/editor/<section>/entries/<int:index>/items/<int:item_index>', methods=['POST'])
@admin_required
def api_update_list_item(section, index, item_index):
    return _apply(g.editor.update_list_item, section, index, item_index, json_body().get('value', ''))


@dashboard_bp.route('/api/editor/skills/input', methods=['POST'])
@admin_required
def api_skill_input():
    return _apply(g.editor.set_skill_input, json_body().get('text', ''))


@dashboard_bp.route('/api/editor/skills/add', methods=['POST'])
@admin_required
def api_add_skill():
    data = json_body()
    if 'text' in data:
        g.editor.set_skill_input(data['text'])
    if not g.editor.add_skill():
        return editor_response(False, 'Enter a skill first.')
    return editor_response(True, '')


@dashboard_bp.route('/api/editor/skills/<int:index>', methods=['DELETE'])
@admin_required
def api_remove_skill(index):
    return _apply(g.editor.remove_skill, index)


@dashboard_bp.route('/api/editor/social/<channel>', methods=['POST'])
@admin_required
def api_update_social(channel):
    return _apply(g.editor.update_social, channel, json_body().get('value', ''))


@dashboard_bp.route('/api/editor/profile-image', methods=['POST'])
@admin_required
def api_stage_profile_image():
    ok = g.editor.stage_profile_image(json_body().get('url'))
    return editor_response(ok, '' if ok else None)


@dashboard_bp.route('/api/editor/profile-image/upload', methods=['POST'])
@admin_required
def api_upload_profile_image():
    try:
        file_bytes, filename = read_upload()
    except ValidationError as e:
        return editor_response(False, str(e))
    url = g.editor.upload_profile_image(file_bytes, filename)
    return editor_response(url is not None)


@dashboard_bp.route('/api/editor/profile-image/save', methods=['POST'])
@admin_required
def api_save_profile_image():
    return editor_response(g.editor.save_profile_image())


# ===== Logs & uploads =====

@dashboard_bp.route('/api/logs')
@admin_required
def api_logs():
    """Recent application log entries (requires LOGS_DB)"""
    limit = request.args.get('limit', 50, type=int)
    source = request.args.get('source')
    logs = LoggingService.recent_logs(limit=min(max(limit, 1), 500), source=source)
    return jsonify({'success': True, 'logs': logs})


@dashboard_bp.route('/api/cloudinary-sign', methods=['POST'])
@admin_required
def cloudinary_sign():
    """Return a signature for signed browser-side Cloudinary uploads"""
    params = json_body().get('params_to_sign') or {}
    try:
        return jsonify(sign_upload_request(params))
    except ConfigurationError as e:
        return jsonify({'error': str(e)}), 500
