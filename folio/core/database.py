"""
Document Store
==============

Persistence contract for the site content: a tree of JSON documents addressed by
slash-separated paths ("settings", "projects/my-app"), with one-shot reads, full
overwrites, partial updates, deletes and push subscriptions.

Backends:
- MemoryDocumentStore: in-process dict tree (tests, demos)
- SQLiteDocumentStore: one JSON row per top-level key
- FirebaseDocumentStore (folio.core.firebase): Firebase Realtime Database over REST
"""

import copy
import json
import logging
import os
import sqlite3
import threading
from datetime import datetime

from .errors import TransportError

logger = logging.getLogger(__name__)


def split_path(path):
    """Split "a/b/c" into ['a', 'b', 'c'], ignoring empty segments"""
    parts = [p for p in str(path).strip('/').split('/') if p]
    if not parts:
        raise ValueError("Document path must not be empty")
    return parts


def get_in(node, parts):
    """Walk a JSON tree, returning None when any segment is missing"""
    for part in parts:
        if isinstance(node, dict):
            node = node.get(part)
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            return None
    return node


def set_in(node, parts, value):
    """
    Return a copy of `node` with `value` placed at `parts`.
    A None value deletes; containers emptied by a delete are pruned.
    """
    if not parts:
        return value

    if isinstance(node, list):
        node = {str(i): v for i, v in enumerate(node) if v is not None}
    elif isinstance(node, dict):
        node = dict(node)
    else:
        node = {}

    key = parts[0]
    child = set_in(node.get(key), parts[1:], value)
    if child is None:
        node.pop(key, None)
        if not node:
            return None
    else:
        node[key] = child
    return node


def strip_nulls(value):
    """Drop None members from mappings, recursively"""
    if isinstance(value, dict):
        return {str(k): strip_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [strip_nulls(v) for v in value]
    return value


def is_related(a, b):
    """True when one path is a prefix of (or equal to) the other"""
    n = min(len(a), len(b))
    return a[:n] == b[:n]


class Subscription:
    """Handle returned by subscribe(); close() releases it and is idempotent"""

    def __init__(self, unsubscribe):
        self._unsubscribe = unsubscribe
        self._closed = False
        self._lock = threading.Lock()

    @property
    def active(self):
        return not self._closed

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._unsubscribe()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class _Listener:
    __slots__ = ('parts', 'callback', 'on_error')

    def __init__(self, parts, callback, on_error):
        self.parts = parts
        self.callback = callback
        self.on_error = on_error


class DocumentStore:
    """
    Base class for tree-backed stores.

    Subclasses implement _load_root(key) and _save_root(key, value) for the
    top-level documents; reads, writes and notifications are handled here.
    Writes and notifications are serialized, so listeners see changes in
    the order they were written.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._listeners = []

    # ===== Backend hooks =====

    def _load_root(self, key):
        raise NotImplementedError

    def _save_root(self, key, value):
        raise NotImplementedError

    # ===== Reads =====

    def get(self, path):
        """One-shot read of the value at path (None if absent)"""
        parts = split_path(path)
        with self._lock:
            return copy.deepcopy(get_in(self._load_root(parts[0]), parts[1:]))

    def subscribe(self, path, callback, on_error=None):
        """
        Call callback(value) now and after every change at, above or below path.
        Returns a Subscription; close it to stop receiving values.
        """
        parts = split_path(path)
        listener = _Listener(parts, callback, on_error)

        with self._lock:
            self._listeners.append(listener)
            try:
                value = copy.deepcopy(get_in(self._load_root(parts[0]), parts[1:]))
            except Exception as e:
                self._report_error(listener, e)
            else:
                self._deliver(listener, value)

        return Subscription(lambda: self._remove_listener(listener))

    # ===== Writes =====

    def set(self, path, value):
        """Overwrite the node at path; None deletes it"""
        parts = split_path(path)
        with self._lock:
            root = self._load_root(parts[0])
            root = set_in(root, parts[1:], strip_nulls(copy.deepcopy(value)))
            self._save_root(parts[0], root)
            self._notify(parts)

    def update(self, path, partial):
        """Merge only the given top-level keys into the node at path"""
        if not isinstance(partial, dict):
            raise TypeError("update() expects a mapping of keys to values")
        parts = split_path(path)
        with self._lock:
            root = self._load_root(parts[0])
            for key, value in partial.items():
                root = set_in(root, parts[1:] + split_path(key),
                              strip_nulls(copy.deepcopy(value)))
            self._save_root(parts[0], root)
            self._notify(parts)

    def remove(self, path):
        """Delete the node at path"""
        self.set(path, None)

    def close(self):
        """Drop all listeners"""
        with self._lock:
            self._listeners = []

    # ===== Notifications =====

    def _remove_listener(self, listener):
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def _notify(self, changed_parts):
        for listener in list(self._listeners):
            if not is_related(listener.parts, changed_parts):
                continue
            try:
                root = self._load_root(listener.parts[0])
            except Exception as e:
                self._report_error(listener, e)
                continue
            self._deliver(listener, copy.deepcopy(get_in(root, listener.parts[1:])))

    def _deliver(self, listener, value):
        try:
            listener.callback(value)
        except Exception as e:
            logger.error(f"Listener for {'/'.join(listener.parts)} failed: {e}")

    def _report_error(self, listener, error):
        if not isinstance(error, TransportError):
            error = TransportError(str(error))
        if listener.on_error is None:
            logger.error(f"Subscription error on {'/'.join(listener.parts)}: {error}")
            return
        try:
            listener.on_error(error)
        except Exception as e:
            logger.error(f"Error handler for {'/'.join(listener.parts)} failed: {e}")


class MemoryDocumentStore(DocumentStore):
    """Dict-backed store; state lives only as long as the process"""

    def __init__(self, initial=None):
        super().__init__()
        self._roots = copy.deepcopy(initial) if initial else {}

    def _load_root(self, key):
        return self._roots.get(key)

    def _save_root(self, key, value):
        if value is None:
            self._roots.pop(key, None)
        else:
            self._roots[key] = value


class SQLiteDocumentStore(DocumentStore):
    """
    Stores each top-level document as a JSON row in a `documents` table.
    Notifications reach listeners in this process only.
    """

    def __init__(self, db_path):
        super().__init__()
        self.db_path = db_path
        self.init_db()

    def init_db(self):
        """Initialize documents table"""
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS documents (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            conn.commit()

    def _load_root(self, key):
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute('SELECT value FROM documents WHERE key = ?', (key,))
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise TransportError(f"Could not read '{key}': {e}") from e
        return json.loads(row[0]) if row else None

    def _save_root(self, key, value):
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                if value is None:
                    cursor.execute('DELETE FROM documents WHERE key = ?', (key,))
                else:
                    cursor.execute('''
                        INSERT INTO documents (key, value, updated_at)
                        VALUES (?, ?, ?)
                        ON CONFLICT(key) DO UPDATE SET
                            value = excluded.value,
                            updated_at = excluded.updated_at
                    ''', (key, json.dumps(value), datetime.now().isoformat()))
                conn.commit()
        except sqlite3.Error as e:
            raise TransportError(f"Could not write '{key}': {e}") from e
