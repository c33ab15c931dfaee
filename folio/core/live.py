"""
Live Store
==========

Read-only mirror of one document-store path. Remote values are transformed
into an immutable snapshot which is swapped in and pushed to every subscriber
in arrival order. Subscribers always get a value: the current snapshot is
delivered as soon as they subscribe.
"""

import logging
import threading

from .database import Subscription
from .logging_service import LoggingService

logger = logging.getLogger(__name__)


class _Subscriber:
    __slots__ = ('callback',)

    def __init__(self, callback):
        self.callback = callback


class LiveStore:
    """Base class for SettingsStore and ProjectsStore"""

    source = 'store'

    def __init__(self, document_store, path, initial):
        self._documents = document_store
        self._path = path
        self._value = initial
        self._subscribers = []
        self._remote = None
        self.last_error = None
        # start() and delivery use separate locks so a push arriving while
        # start() waits on the document store cannot deadlock.
        self._start_lock = threading.Lock()
        self._dispatch_lock = threading.RLock()

    def _transform(self, raw):
        raise NotImplementedError

    @property
    def snapshot(self):
        """Current value; never None"""
        return self._value

    @property
    def started(self):
        return self._remote is not None

    def start(self):
        """Attach to the document store (idempotent)"""
        with self._start_lock:
            if self._remote is not None:
                return
            self._remote = self._documents.subscribe(self._path, self._on_remote, self._on_error)

    def subscribe(self, callback):
        """Call callback(snapshot) now and on every change; returns a Subscription"""
        self.start()
        subscriber = _Subscriber(callback)
        with self._dispatch_lock:
            self._subscribers.append(subscriber)
            self._call(subscriber, self._value)
        return Subscription(lambda: self._unsubscribe(subscriber))

    def close(self):
        """Release the remote subscription and drop all subscribers"""
        with self._start_lock:
            remote, self._remote = self._remote, None
        if remote is not None:
            remote.close()
        with self._dispatch_lock:
            self._subscribers = []

    def _unsubscribe(self, subscriber):
        with self._dispatch_lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

    def _on_remote(self, raw):
        try:
            value = self._transform(raw)
        except Exception as e:
            LoggingService.log_error_with_traceback(self.source, e, {'path': self._path})
            return

        with self._dispatch_lock:
            self._value = value
            self.last_error = None
            for subscriber in list(self._subscribers):
                self._call(subscriber, value)

    def _on_error(self, error):
        self.last_error = str(error)
        LoggingService.error(
            self.source,
            f"Subscription to '{self._path}' failed; keeping last value: {error}",
        )

    def _call(self, subscriber, value):
        try:
            subscriber.callback(value)
        except Exception as e:
            logger.error(f"{self.source} subscriber failed: {e}")
