"""
Firebase Document Store
=======================

DocumentStore contract over the Firebase Realtime Database REST API.

- get/set/update/remove map to GET/PUT/PATCH/DELETE on {url}/{path}.json
- subscribe streams text/event-stream on a daemon thread and applies the
  put/patch events to a local copy of the subscribed node
"""

import copy
import json
import logging
import threading

import requests

from .database import Subscription, set_in, split_path, strip_nulls
from .errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)


class FirebaseDocumentStore:
    """Firebase Realtime Database client with push subscriptions"""

    def __init__(self, database_url, auth_token=None, timeout=10, session=None):
        if not database_url:
            raise ConfigurationError("FIREBASE_DATABASE_URL is not configured")
        self.url = database_url.rstrip('/')
        self.auth_token = auth_token
        self.timeout = timeout
        self.session = session or requests.Session()
        self._streams = []
        self._lock = threading.Lock()

    def _build_url(self, path):
        """Build the full URL for a node"""
        return f"{self.url}/{'/'.join(split_path(path))}.json"

    def _params(self):
        return {'auth': self.auth_token} if self.auth_token else {}

    def _request(self, method, path, payload=None):
        try:
            response = self.session.request(
                method,
                self._build_url(path),
                params=self._params(),
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Firebase {method} /{path} failed: {e}") from e
        return response.json() if response.text else None

    # ===== DocumentStore contract =====

    def get(self, path):
        """One-shot read of the value at path (None if absent)"""
        return self._request('GET', path)

    def set(self, path, value):
        """Overwrite the node at path; None deletes it"""
        if value is None:
            self.remove(path)
            return
        self._request('PUT', path, strip_nulls(value))

    def update(self, path, partial):
        """Merge only the given keys into the node at path"""
        if not isinstance(partial, dict):
            raise TypeError("update() expects a mapping of keys to values")
        self._request('PATCH', path, strip_nulls(partial) if partial else {})

    def remove(self, path):
        """Delete the node at path"""
        self._request('DELETE', path)

    def subscribe(self, path, callback, on_error=None):
        """Stream changes at path; returns a Subscription"""
        stream = _EventStream(self, split_path(path), callback, on_error)
        with self._lock:
            self._streams.append(stream)
        stream.start()

        def _unsubscribe():
            stream.stop()
            with self._lock:
                if stream in self._streams:
                    self._streams.remove(stream)

        return Subscription(_unsubscribe)

    def close(self):
        """Stop every open stream"""
        with self._lock:
            streams, self._streams = self._streams, []
        for stream in streams:
            stream.stop()


class _EventStream(threading.Thread):
    """One Server-Sent Events connection for a subscribed node"""

    def __init__(self, store, parts, callback, on_error):
        super().__init__(daemon=True, name=f"firebase-stream-{'/'.join(parts)}")
        self.store = store
        self.parts = parts
        self.callback = callback
        self.on_error = on_error
        self._value = None
        self._response = None
        self._stopped = threading.Event()

    def stop(self):
        self._stopped.set()
        response = self._response
        if response is not None:
            try:
                response.close()
            except Exception as e:
                logger.debug(f"Closing stream response failed: {e}")

    def run(self):
        path = '/'.join(self.parts)
        try:
            response = self.store.session.get(
                self.store._build_url(path),
                params=self.store._params(),
                headers={'Accept': 'text/event-stream'},
                stream=True,
                timeout=(self.store.timeout, None),
            )
            self._response = response
            response.raise_for_status()
            self.consume(response.iter_lines(decode_unicode=True))
        except requests.exceptions.RequestException as e:
            if not self._stopped.is_set():
                self._fail(TransportError(f"Firebase stream /{path} failed: {e}"))
        except TransportError as e:
            self._fail(e)
        except ValueError as e:
            self._fail(TransportError(f"Malformed Firebase event on /{path}: {e}"))

    def consume(self, lines):
        """Parse SSE lines and dispatch complete events"""
        event = None
        data_lines = []
        for line in lines:
            if self._stopped.is_set():
                return
            if line is None:
                continue
            if line == '':
                if event:
                    self.handle_event(event, '\n'.join(data_lines))
                event, data_lines = None, []
            elif line.startswith('event:'):
                event = line[len('event:'):].strip()
            elif line.startswith('data:'):
                data_lines.append(line[len('data:'):].strip())

    def handle_event(self, event, data):
        if event == 'keep-alive':
            return
        if event == 'cancel':
            raise TransportError("Firebase cancelled the subscription (permission denied)")
        if event == 'auth_revoked':
            raise TransportError("Firebase credential expired; sign in again")
        if event not in ('put', 'patch'):
            logger.debug(f"Ignoring Firebase event {event}")
            return

        payload = json.loads(data)
        rel = [p for p in payload.get('path', '/').split('/') if p]
        body = payload.get('data')

        if event == 'put':
            self._value = set_in(self._value, rel, strip_nulls(body))
        else:
            for key, value in (body or {}).items():
                self._value = set_in(self._value, rel + split_path(key), strip_nulls(value))

        if self._stopped.is_set():
            return
        try:
            self.callback(copy.deepcopy(self._value))
        except Exception as e:
            logger.error(f"Listener for {'/'.join(self.parts)} failed: {e}")

    def _fail(self, error):
        if self._stopped.is_set():
            return
        if self.on_error is None:
            logger.error(str(error))
            return
        try:
            self.on_error(error)
        except Exception as e:
            logger.error(f"Error handler for {'/'.join(self.parts)} failed: {e}")
