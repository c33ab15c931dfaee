"""
Critical Integration Tests for Folio
====================================

Focused tests covering the integration points most likely to break:
extension wiring, public pages and APIs, the admin login gate and the
editor JSON API.
Run with: pytest tests/test_critical.py -v
"""

import json
import os
import shutil
import tempfile

import pytest
from flask import Flask

from folio import Folio
from folio.core.errors import ConfigurationError

ADMIN_EMAIL = "admin@example.com"


# ---------------------------------------------------------------------------
# 1. Framework initialisation -- Folio(app) does not raise
# ---------------------------------------------------------------------------

def test_framework_initialisation(app, folio):
    """Folio(app) boots without errors and stores itself on the app."""
    assert "folio" in app.extensions
    assert app.extensions["folio"] is folio
    assert folio.settings_store.started
    assert folio.projects_store.started


# ---------------------------------------------------------------------------
# 2. Config resolution -- DB paths are non-empty and contain expected names
# ---------------------------------------------------------------------------

def test_config_db_paths(app):
    """DB_DIR, USER_DB and CONTENT_DB resolve to the configured paths."""
    assert app.config["DB_DIR"], "DB_DIR must not be empty"
    assert "users.db" in app.config["USER_DB"]
    assert "content.db" in app.config["CONTENT_DB"]


# ---------------------------------------------------------------------------
# 3. Blueprint registration -- all expected modules are registered
# ---------------------------------------------------------------------------

EXPECTED_MODULES = ["site", "settings", "dashboard", "projects"]


def test_all_blueprints_registered(folio):
    registered = folio.get_registered_modules()

    for mod in EXPECTED_MODULES:
        assert mod in registered, (
            f"Module '{mod}' was not registered. Registered: {registered}"
        )
    assert len(registered) == len(EXPECTED_MODULES)


# ---------------------------------------------------------------------------
# 4. Template context -- site_settings and brand_name are injected
# ---------------------------------------------------------------------------

def test_template_context_injection(app):
    """Context processor injects site_settings and brand_name."""
    with app.test_request_context("/"):
        ctx = {}
        for func in app.template_context_processors[None]:
            ctx.update(func())

        assert "site_settings" in ctx, "site_settings missing from template context"
        assert "brand_name" in ctx, "brand_name missing from template context"
        assert ctx["brand_name"] == ctx["site_settings"].name
        assert len(ctx["brand_name"]) > 0


def test_template_filters_registered(app):
    """format_content is registered by the site blueprint."""
    assert "format_content" in app.jinja_env.filters
    assert callable(app.jinja_env.filters["format_content"])


# ---------------------------------------------------------------------------
# 5. Database backends -- default SQLite backend creates DB_DIR
# ---------------------------------------------------------------------------

def test_database_dir_creation():
    """Folio creates the configured DB_DIR and the SQLite content database."""
    d = tempfile.mkdtemp(prefix="folio-dbtest-")
    target = os.path.join(d, "sub", "databases")

    try:
        app = Flask(__name__)
        app.config["TESTING"] = True
        app.config["SECRET_KEY"] = "test-secret"
        app.config["DB_DIR"] = target
        app.config["USER_DB"] = os.path.join(target, "users.db")
        app.config["CONTENT_DB"] = os.path.join(target, "content.db")
        app.config["DOCUMENT_BACKEND"] = "sqlite"

        folio = Folio(app)
        try:
            assert os.path.isdir(target), f"DB_DIR was not created at {target}"
            assert os.path.exists(app.config["CONTENT_DB"])
            assert os.path.exists(app.config["USER_DB"])
        finally:
            folio.close()
    finally:
        shutil.rmtree(d, ignore_errors=True)


def test_unknown_backend_rejected(tmp_db_dir):
    app = Flask(__name__)
    app.config["DB_DIR"] = tmp_db_dir
    app.config["DOCUMENT_BACKEND"] = "mongo"

    with pytest.raises(ConfigurationError):
        Folio(app)


def test_firebase_backend_requires_url(tmp_db_dir):
    app = Flask(__name__)
    app.config["DB_DIR"] = tmp_db_dir
    app.config["DOCUMENT_BACKEND"] = "firebase"
    app.config["FIREBASE_DATABASE_URL"] = ""

    with pytest.raises(ConfigurationError):
        Folio(app)


# ---------------------------------------------------------------------------
# 6. Public pages
# ---------------------------------------------------------------------------

def test_home_page_renders_defaults(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"Your Name" in response.data
    assert b"Portfolio Site" in response.data


def test_home_page_follows_remote_settings(client, document_store):
    document_store.update("settings", {"name": "Jane Doe"})

    response = client.get("/")
    assert b"Jane Doe" in response.data
    # no profile image: initials placeholder
    assert b"JD" in response.data


def test_project_detail_static_fallback(client):
    response = client.get("/projects/project-1")
    assert response.status_code == 200
    assert b"Portfolio Site" in response.data


def test_project_detail_live_project(client, document_store):
    document_store.set("projects/robot-arm", {
        "name": "Robot Arm",
        "description": "Six axis arm",
        "images": ["https://img.example.com/arm.png"],
        "skills": ["C++"],
        "links": {"github": "https://github.com/example/arm"},
    })

    response = client.get("/projects/robot-arm")
    assert response.status_code == 200
    assert b"Robot Arm" in response.data
    assert b"https://github.com/example/arm" in response.data


def test_project_detail_not_found(client):
    response = client.get("/projects/does-not-exist")
    assert response.status_code == 404
    assert b"Project not found." in response.data


# ---------------------------------------------------------------------------
# 7. Public APIs
# ---------------------------------------------------------------------------

def test_api_settings_snapshot(client, document_store):
    document_store.update("settings", {"accentColor": "#ff0000"})

    response = client.get("/api/settings")
    data = response.get_json()
    assert data["success"] is True
    assert data["settings"]["accentColor"] == "#ff0000"
    assert data["settings"]["name"] == "Your Name"


def test_api_projects_cors(client):
    response = client.get("/api/projects", headers={"Origin": "https://elsewhere.example"})
    assert response.status_code == 200
    assert "Access-Control-Allow-Origin" in response.headers

    projects = response.get_json()["projects"]
    assert [p["slug"] for p in projects] == ["project-1", "project-2"]


def test_settings_stream_first_frame(client, folio):
    response = client.get("/api/settings/stream", buffered=False)
    assert response.mimetype == "text/event-stream"

    first = next(response.iter_encoded()).decode()
    assert first.startswith("data: ")
    payload = json.loads(first[len("data: "):])
    assert payload["name"] == folio.settings_store.snapshot.name

    response.close()


# ---------------------------------------------------------------------------
# 8. Admin auth guard
# ---------------------------------------------------------------------------

def test_admin_auth_redirect(client):
    """Unauthenticated GET to /admin/ should redirect to login."""
    response = client.get("/admin/", follow_redirects=False)
    assert response.status_code == 302
    assert "/admin/login" in response.headers.get("Location", "")


def test_admin_api_requires_login(client):
    response = client.get("/admin/api/editor")
    assert response.status_code == 401
    assert response.get_json()["success"] is False

    response = client.post("/admin/api/projects/submit")
    assert response.status_code == 401


def test_login_rejects_bad_password(client):
    response = client.post("/admin/login", data={"email": ADMIN_EMAIL, "password": "wrong"})
    assert response.status_code == 200
    assert b"Invalid email or password" in response.data
    assert b"wrong" not in response.data

    assert client.get("/admin/status").status_code == 401


def test_failed_logins_do_not_accumulate_sessions(client, folio):
    before = len(folio.admin_registry)

    for _ in range(5):
        client.post("/admin/login", data={"email": ADMIN_EMAIL, "password": "wrong"})

    assert len(folio.admin_registry) == before
    with client.session_transaction() as sess:
        assert "admin_token" not in sess


def test_login_status_and_logout(admin_client):
    status = admin_client.get("/admin/status").get_json()
    assert status["logged_in"] is True
    assert status["admin_email"] == ADMIN_EMAIL

    assert admin_client.get("/admin/").status_code == 200

    admin_client.get("/admin/logout")
    assert admin_client.get("/admin/api/editor").status_code == 401


def test_create_admin_requires_login_once_admins_exist(client):
    response = client.get("/admin/create-admin", follow_redirects=False)
    assert response.status_code == 302
    assert "/admin/login" in response.headers.get("Location", "")


# ---------------------------------------------------------------------------
# 9. Editor API
# ---------------------------------------------------------------------------

def test_editor_save_general_writes_only_general_keys(admin_client, document_store):
    document_store.set("settings", {"aboutMe": "Hello", "skills": ["Go"]})

    admin_client.post("/admin/api/editor/tab", json={"section": "general"})
    response = admin_client.post(
        "/admin/api/editor/general/field", json={"field": "name", "value": "Jane"}
    )
    assert response.get_json()["editor"]["drafts"]["general"]["name"] == "Jane"

    response = admin_client.post("/admin/api/editor/general/save")
    data = response.get_json()
    assert response.status_code == 200
    assert data["success"] is True
    assert data["editor"]["statusLevel"] == "success"

    stored = document_store.get("settings")
    assert stored["name"] == "Jane"
    assert stored["aboutMe"] == "Hello"
    assert stored["skills"] == ["Go"]
    assert set(stored) == {"name", "title", "description", "accentColor", "aboutMe", "skills"}


def test_editor_rejects_field_from_other_section(admin_client):
    response = admin_client.post(
        "/admin/api/editor/general/field", json={"field": "aboutMe", "value": "x"}
    )
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_add_skill_via_api(admin_client):
    response = admin_client.post("/admin/api/editor/skills/add", json={"text": "  Rust "})
    data = response.get_json()
    assert response.status_code == 200
    assert data["editor"]["drafts"]["skills"]["skills"][-1] == "Rust"
    assert data["editor"]["skillInput"] == ""

    response = admin_client.post("/admin/api/editor/skills/add", json={"text": "   "})
    assert response.status_code == 400


def test_project_submit_via_api(admin_client, document_store, uploader):
    admin_client.post("/admin/api/projects/form", json={
        "name": "My Cool Project!",
        "description": "Short",
        "skills_text": "Python, Flask, ",
    })
    response = admin_client.post("/admin/api/projects/images",
                                 json={"url": "https://img.example.com/1.png"})
    assert response.get_json()["editor"]["projectForm"]["images"] == ["https://img.example.com/1.png"]

    response = admin_client.post("/admin/api/projects/submit")
    data = response.get_json()
    assert data["success"] is True
    assert data["message"] == "Project saved successfully."

    record = document_store.get("projects/my-cool-project")
    assert record["skills"] == ["Python", "Flask"]
    assert record["images"] == ["https://img.example.com/1.png"]
    assert [p["slug"] for p in data["editor"]["projects"]] == ["my-cool-project"]


def test_project_submit_validation_via_api(admin_client, document_store):
    response = admin_client.post("/admin/api/projects/submit")
    assert response.status_code == 400
    assert response.get_json()["message"] == "Project name and at least one image are required."
    assert document_store.get("projects") is None


def test_cloudinary_sign_missing_credentials(admin_client, app, monkeypatch):
    from folio.core.config import Config

    monkeypatch.setattr(Config, "CLOUDINARY_API_KEY", None)
    monkeypatch.setattr(Config, "CLOUDINARY_API_SECRET", None)
    monkeypatch.delenv("CLOUDINARY_API_KEY", raising=False)
    monkeypatch.delenv("CLOUDINARY_API_SECRET", raising=False)
    app.config["CLOUDINARY_API_KEY"] = None
    app.config["CLOUDINARY_API_SECRET"] = None

    response = admin_client.post("/admin/api/cloudinary-sign", json={})
    assert response.status_code == 500
    assert "error" in response.get_json()


def test_cloudinary_sign_with_credentials(admin_client, app):
    app.config["CLOUDINARY_API_KEY"] = "key-123"
    app.config["CLOUDINARY_API_SECRET"] = "shh"

    response = admin_client.post("/admin/api/cloudinary-sign",
                                 json={"params_to_sign": {"folder": "projects"}})
    data = response.get_json()
    assert response.status_code == 200
    assert data["apiKey"] == "key-123"
    assert len(data["signature"]) == 40
    assert isinstance(data["timestamp"], int)
