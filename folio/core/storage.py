"""
Storage Utility
===============

Shared image upload with Cloudinary / local branching.
Every path returns a publicly fetchable URL or raises a FolioError.
"""

import hashlib
import os
import time

import requests
from flask import current_app

from .config import _get_config_value
from .errors import ConfigurationError, TransportError

CLOUDINARY_UPLOAD_URL = 'https://api.cloudinary.com/v1_1/{cloud_name}/image/upload'

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp', 'svg'}


def get_storage_type():
    """Get storage type (local or cloudinary)"""
    return (_get_config_value('STORAGE_TYPE', 'local') or 'local').lower()


def is_cloud_storage():
    """Check if uploads go to Cloudinary"""
    return get_storage_type() == 'cloudinary'


def upload_file(file_bytes, filename, subfolder):
    """Upload file to Cloudinary or the local static folder.

    Args:
        file_bytes: Raw bytes of the image.
        filename: Target filename (e.g. "abc123.jpg").
        subfolder: Subfolder name (e.g. "profile", "projects").

    Returns:
        Public URL (cloud) or local path like "/static/uploads/projects/abc.jpg" (local).
    """
    if not file_bytes:
        raise TransportError("Upload rejected: the file is empty")

    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    if ext not in ALLOWED_EXTENSIONS:
        raise TransportError(f"Upload rejected: .{ext or '?'} files are not images")

    if is_cloud_storage():
        return _upload_to_cloudinary(file_bytes, filename, subfolder)
    return _save_locally(file_bytes, filename, subfolder)


def _upload_to_cloudinary(file_bytes, filename, subfolder):
    """Unsigned upload through a Cloudinary upload preset."""
    cloud_name = _get_config_value('CLOUDINARY_CLOUD_NAME')
    upload_preset = _get_config_value('CLOUDINARY_UPLOAD_PRESET')

    if not cloud_name or not upload_preset:
        raise ConfigurationError(
            'Missing Cloudinary settings. Set CLOUDINARY_CLOUD_NAME and CLOUDINARY_UPLOAD_PRESET.'
        )

    try:
        response = requests.post(
            CLOUDINARY_UPLOAD_URL.format(cloud_name=cloud_name),
            data={'upload_preset': upload_preset, 'folder': subfolder},
            files={'file': (filename, file_bytes)},
            timeout=30,
        )
    except requests.exceptions.RequestException as e:
        raise TransportError(f"Cloudinary upload failed: {e}") from e

    try:
        payload = response.json()
    except ValueError:
        payload = {}

    if not response.ok:
        message = (payload.get('error') or {}).get('message') or 'Cloudinary upload failed.'
        raise TransportError(message)

    secure_url = payload.get('secure_url')
    if not secure_url:
        raise TransportError('Cloudinary response did not include secure_url.')
    return secure_url


def _save_locally(file_bytes, filename, subfolder):
    """Save to local static folder."""
    root = _get_config_value('UPLOAD_SUBFOLDER', 'uploads')
    upload_dir = os.path.join(current_app.static_folder, root, subfolder)
    os.makedirs(upload_dir, exist_ok=True)
    filepath = os.path.join(upload_dir, filename)
    try:
        with open(filepath, 'wb') as f:
            f.write(file_bytes)
    except OSError as e:
        raise TransportError(f"Could not save upload: {e}") from e
    return f"/static/{root}/{subfolder}/{filename}"


def sign_params(params, api_secret):
    """
    Cloudinary request signature: SHA-1 of the sorted "key=value" pairs
    joined with "&", followed by the API secret.
    """
    to_sign = '&'.join(
        f"{key}={','.join(map(str, value)) if isinstance(value, (list, tuple)) else value}"
        for key, value in sorted(params.items())
        if value not in (None, '')
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


def sign_upload_request(params_to_sign=None):
    """Return {timestamp, signature, apiKey} for a signed Cloudinary upload"""
    api_key = _get_config_value('CLOUDINARY_API_KEY')
    api_secret = _get_config_value('CLOUDINARY_API_SECRET')
    if not api_key or not api_secret:
        raise ConfigurationError('Cloudinary API credentials are not configured')

    timestamp = int(time.time())
    signature = sign_params({**(params_to_sign or {}), 'timestamp': timestamp}, api_secret)
    return {'timestamp': timestamp, 'signature': signature, 'apiKey': api_key}
