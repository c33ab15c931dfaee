"""
Admin Session
=============

Sign-in state machine that gates the admin editor:

    SIGNED_OUT --sign_in()--> SIGNING_IN --ok--> SIGNED_IN --sign_out()--> SIGNED_OUT
                                         +--fail--> SIGNED_OUT (with error)
"""

import threading
from enum import Enum

from ...core.database import Subscription
from ...core.errors import AuthError, ConfigurationError
from ...core.logging_service import LoggingService


class SessionState(Enum):
    SIGNED_OUT = 'signed_out'
    SIGNING_IN = 'signing_in'
    SIGNED_IN = 'signed_in'


class AdminSession:
    def __init__(self, provider):
        self.provider = provider
        self.state = SessionState.SIGNED_OUT
        self.user = None
        self.error = ''
        self._observers = []
        self._lock = threading.Lock()

    @property
    def is_signed_in(self):
        return self.state is SessionState.SIGNED_IN

    @property
    def email(self):
        return self.user.get('email') if self.user else None

    def subscribe(self, callback):
        """callback(session) after every state change"""
        self._observers.append(callback)

        def _unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return Subscription(_unsubscribe)

    def _transition(self, state):
        self.state = state
        for callback in list(self._observers):
            try:
                callback(self)
            except Exception as e:
                LoggingService.error('auth', f"Session observer failed: {e}")

    def sign_in(self, email, password):
        """Attempt a sign-in; True when the session ends up SIGNED_IN"""
        email = (email or '').strip().lower()
        if not email or not password:
            self.error = 'Please enter both email and password'
            return False

        with self._lock:
            if self.state is not SessionState.SIGNED_OUT:
                self.error = 'A sign-in is already in progress' \
                    if self.state is SessionState.SIGNING_IN else 'Already signed in'
                return False
            self.state = SessionState.SIGNING_IN
        self._transition(SessionState.SIGNING_IN)

        try:
            user = self.provider.sign_in(email, password)
        except (AuthError, ConfigurationError) as e:
            message = f"Login failed: {e}"
        except Exception as e:
            LoggingService.log_error_with_traceback('auth', e, {'email': email})
            message = 'Login failed: unexpected error, please try again'
        else:
            self.user = user
            self.error = ''
            LoggingService.log_user_action('auth', 'Admin signed in', details={'email': email})
            self._transition(SessionState.SIGNED_IN)
            return True

        self.user = None
        self.error = message
        LoggingService.warning('auth', 'Failed admin sign-in', {'email': email, 'reason': message})
        self._transition(SessionState.SIGNED_OUT)
        return False

    def sign_out(self):
        if self.state is not SessionState.SIGNED_IN:
            return False
        try:
            self.provider.sign_out(self.user)
        except Exception as e:
            LoggingService.error('auth', f"Provider sign-out failed: {e}")
        LoggingService.log_user_action('auth', 'Admin signed out', details={'email': self.email})
        self.user = None
        self.error = ''
        self._transition(SessionState.SIGNED_OUT)
        return True

    def expire(self, message='Your session has expired. Please sign in again.'):
        """Drop back to SIGNED_OUT after the provider rejected the session"""
        if self.state is SessionState.SIGNED_OUT:
            return
        self.user = None
        self.error = message
        self._transition(SessionState.SIGNED_OUT)
