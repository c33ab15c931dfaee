"""
Admin Registry
==============

Per-login admin state. The browser session only carries an opaque
`admin_token`; the AdminSession and its AdminEditor (with all unsaved
drafts) live in this process, keyed by that token. Signing out closes the
editor and forgets the token.
"""

import secrets
import threading

from .editor import AdminEditor
from .session import AdminSession, SessionState


class AdminEntry:
    """One browser login: its session, and an editor while signed in"""

    def __init__(self, folio):
        self.folio = folio
        self.session = AdminSession(folio.auth_provider)
        self.editor = None
        self._watch = self.session.subscribe(self._on_session_change)

    def _on_session_change(self, admin_session):
        if admin_session.state is SessionState.SIGNED_OUT and self.editor is not None:
            self.editor.close()
            self.editor = None

    def get_editor(self):
        """The editor for this login; created on first use after sign-in"""
        if not self.session.is_signed_in:
            return None
        if self.editor is None:
            self.editor = AdminEditor(
                self.folio.settings_store,
                self.folio.document_store,
                projects_store=self.folio.projects_store,
                uploader=self.folio.uploader,
                settings_path=self.folio.settings_path,
                projects_path=self.folio.projects_path,
            )
        return self.editor

    def close(self):
        self.session.sign_out()
        self._watch.close()


class AdminRegistry:
    def __init__(self, folio):
        self.folio = folio
        self._entries = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._entries)

    def create(self):
        token = secrets.token_urlsafe(32)
        entry = AdminEntry(self.folio)
        with self._lock:
            self._entries[token] = entry
        return token, entry

    def get(self, token):
        if not token:
            return None
        with self._lock:
            return self._entries.get(token)

    def discard(self, token):
        with self._lock:
            entry = self._entries.pop(token, None)
        if entry is not None:
            entry.close()

    def close(self):
        with self._lock:
            entries, self._entries = list(self._entries.values()), {}
        for entry in entries:
            entry.close()
