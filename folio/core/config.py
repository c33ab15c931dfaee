import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for the Folio portfolio site.
    Projects should provide database paths and credentials via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')
    UPLOAD_SUBFOLDER = os.getenv('UPLOAD_SUBFOLDER', 'uploads')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths - use environment variables or fallback to DB_DIR
    CONTENT_DB = os.getenv('CONTENT_DB', os.path.join(DB_DIR, 'content.db'))
    USER_DB = os.getenv('USER_DB', os.path.join(DB_DIR, 'users.db'))
    LOGS_DB = os.getenv('LOGS_DB')

    # Document store backend: sqlite, memory or firebase
    DOCUMENT_BACKEND = os.getenv('DOCUMENT_BACKEND', 'sqlite')
    SETTINGS_PATH = 'settings'
    PROJECTS_PATH = 'projects'

    # Firebase Realtime Database
    FIREBASE_DATABASE_URL = os.getenv('FIREBASE_DATABASE_URL')
    FIREBASE_DATABASE_SECRET = os.getenv('FIREBASE_DATABASE_SECRET')

    # Admin auth: local admin table or Firebase email/password
    AUTH_PROVIDER = os.getenv('AUTH_PROVIDER', 'local')
    FIREBASE_API_KEY = os.getenv('FIREBASE_API_KEY')

    # Uploads: local static folder or Cloudinary
    STORAGE_TYPE = os.getenv('STORAGE_TYPE', 'local')
    CLOUDINARY_CLOUD_NAME = os.getenv('CLOUDINARY_CLOUD_NAME')
    CLOUDINARY_UPLOAD_PRESET = os.getenv('CLOUDINARY_UPLOAD_PRESET')
    CLOUDINARY_API_KEY = os.getenv('CLOUDINARY_API_KEY')
    CLOUDINARY_API_SECRET = os.getenv('CLOUDINARY_API_SECRET')

    # Port for local server (optional, projects can set this)
    port = int(os.getenv('PORT', '5000'))


def _get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config class, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val:
        return val
    return os.getenv(key, default)
