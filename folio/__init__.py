"""
Folio - A Flask Portfolio Site
==============================

Personal portfolio site whose content (bio, skills, experience, education,
projects, profile image) lives in a realtime document store and is edited
from an admin panel.

Usage:
    from flask import Flask
    from folio import Folio

    app = Flask(__name__)
    folio = Folio(app)

Visit / for the site and /admin for the editor.
"""

import logging
import os
from datetime import datetime

from .core.config import Config
from .core.database import MemoryDocumentStore, SQLiteDocumentStore
from .core.errors import ConfigurationError, FolioError
from .core.logging_service import LoggingService
from .core.storage import upload_file

__version__ = '0.1.0'

logger = logging.getLogger(__name__)

CONFIG_KEYS = (
    'DB_DIR', 'CONTENT_DB', 'USER_DB', 'LOGS_DB', 'DOCUMENT_BACKEND',
    'FIREBASE_DATABASE_URL', 'FIREBASE_DATABASE_SECRET', 'AUTH_PROVIDER', 'FIREBASE_API_KEY',
    'STORAGE_TYPE', 'CLOUDINARY_CLOUD_NAME', 'CLOUDINARY_UPLOAD_PRESET',
    'CLOUDINARY_API_KEY', 'CLOUDINARY_API_SECRET', 'UPLOAD_SUBFOLDER',
)


class Folio:
    """
    Flask extension that wires the document store, live stores, auth provider
    and upload collaborator into an app and registers the blueprints.

    Collaborators may be injected (tests pass a MemoryDocumentStore and a fake
    uploader); anything not given is built from configuration.
    """

    def __init__(self, app=None, config=None, document_store=None, auth_provider=None,
                 uploader=None):
        self.config = config or {}
        self.document_store = document_store
        self.auth_provider = auth_provider
        self.uploader = uploader
        self.settings_store = None
        self.projects_store = None
        self.admin_registry = None
        self.settings_path = Config.SETTINGS_PATH
        self.projects_path = Config.PROJECTS_PATH
        self._modules = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        for key, value in self.config.items():
            app.config[key] = value
        for key in CONFIG_KEYS:
            app.config.setdefault(key, getattr(Config, key, None))
        if not app.config.get('SECRET_KEY'):
            app.config['SECRET_KEY'] = Config.SECRET_KEY
        if not app.config.get('SECRET_KEY'):
            logger.warning("FLASK_SECRET_KEY is not set; admin sessions will not work")

        if app.config.get('DB_DIR'):
            os.makedirs(app.config['DB_DIR'], exist_ok=True)

        from .modules.dashboard import dashboard_bp
        from .modules.dashboard.registry import AdminRegistry
        from .modules.projects import projects_bp, ProjectsStore
        from .modules.settings import settings_bp, SettingsStore
        from .modules.site import site_bp

        if self.document_store is None:
            self.document_store = self._build_document_store(app.config)
        if self.auth_provider is None:
            self.auth_provider = self._build_auth_provider(app.config)
        if self.uploader is None:
            self.uploader = upload_file

        self.settings_store = SettingsStore(self.document_store, path=self.settings_path)
        self.projects_store = ProjectsStore(self.document_store, path=self.projects_path)
        self.admin_registry = AdminRegistry(self)

        app.extensions['folio'] = self

        for name, blueprint in (
            ('site', site_bp),
            ('settings', settings_bp),
            ('dashboard', dashboard_bp),
            ('projects', projects_bp),
        ):
            app.register_blueprint(blueprint)
            self._modules.append(name)

        app.context_processor(self._inject_site)

        # A push can arrive before the first request; attach with the app config active
        with app.app_context():
            try:
                self.settings_store.start()
                self.projects_store.start()
            except FolioError as e:
                LoggingService.error('folio', f"Could not attach live stores: {e}")

        logger.info(f"Folio initialized with modules: {', '.join(self._modules)}")

    def _inject_site(self):
        settings = self.settings_store.snapshot
        return dict(
            site_settings=settings,
            brand_name=settings.name,
            current_year=datetime.now().year,
        )

    @staticmethod
    def _build_document_store(config):
        backend = (config.get('DOCUMENT_BACKEND') or 'sqlite').lower()
        if backend == 'memory':
            return MemoryDocumentStore()
        if backend == 'sqlite':
            return SQLiteDocumentStore(config.get('CONTENT_DB') or Config.CONTENT_DB)
        if backend == 'firebase':
            from .core.firebase import FirebaseDocumentStore
            return FirebaseDocumentStore(
                config.get('FIREBASE_DATABASE_URL'),
                auth_token=config.get('FIREBASE_DATABASE_SECRET'),
            )
        raise ConfigurationError(f"Unknown DOCUMENT_BACKEND: {backend}")

    @staticmethod
    def _build_auth_provider(config):
        from .modules.dashboard.auth import AdminTableAuth, FirebaseAuth

        provider = (config.get('AUTH_PROVIDER') or 'local').lower()
        if provider == 'local':
            return AdminTableAuth(config.get('USER_DB') or Config.USER_DB)
        if provider == 'firebase':
            return FirebaseAuth(config.get('FIREBASE_API_KEY'))
        raise ConfigurationError(f"Unknown AUTH_PROVIDER: {provider}")

    def get_registered_modules(self):
        return list(self._modules)

    def close(self):
        """Release live subscriptions, admin sessions and the document store"""
        if self.admin_registry is not None:
            self.admin_registry.close()
        for store in (self.settings_store, self.projects_store):
            if store is not None:
                store.close()
        if self.document_store is not None:
            self.document_store.close()


__all__ = ['Folio', '__version__']
