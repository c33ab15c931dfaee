"""
Shared fixtures for the Folio test suite.

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import os
import shutil
import tempfile

import pytest
from flask import Flask

from folio import Folio
from folio.core.database import MemoryDocumentStore

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "secret-password"


class FakeUploader:
    """Upload collaborator that records calls and returns a CDN-style URL."""

    def __init__(self):
        self.calls = []

    def __call__(self, file_bytes, filename, subfolder):
        self.calls.append((file_bytes, filename, subfolder))
        return f"https://cdn.example.com/{subfolder}/{filename}"


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="folio-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def document_store():
    return MemoryDocumentStore()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def app(tmp_db_dir, document_store, uploader):
    """Flask app with Folio wired to an in-memory document store."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_db_dir
    app.config["USER_DB"] = os.path.join(tmp_db_dir, "users.db")
    app.config["CONTENT_DB"] = os.path.join(tmp_db_dir, "content.db")
    app.config["LOGS_DB"] = None
    app.config["DOCUMENT_BACKEND"] = "memory"
    app.config["AUTH_PROVIDER"] = "local"

    folio = Folio(app, document_store=document_store, uploader=uploader)
    folio.auth_provider.create_admin(ADMIN_EMAIL, ADMIN_PASSWORD)

    yield app
    folio.close()


@pytest.fixture
def folio(app):
    return app.extensions["folio"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client with a signed-in admin session."""
    response = client.post(
        "/admin/login",
        data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 302
    return client
