"""
Admin Auth Providers
====================

Credential checks behind the admin login. A provider's sign_in() returns a
user dict or raises AuthError / ConfigurationError with a message that is
safe to show on the login form.
"""

import os
import sqlite3

import requests
from werkzeug.security import check_password_hash, generate_password_hash

from ...core.errors import AuthError, ConfigurationError, ValidationError


class AuthProvider:
    name = 'base'

    def sign_in(self, email, password):
        raise NotImplementedError

    def sign_out(self, user):
        """Providers without server-side sessions have nothing to revoke"""


class AdminTableAuth(AuthProvider):
    """Admins stored in an `admin` table of the users SQLite database"""

    name = 'local'

    def __init__(self, user_db):
        self.user_db = user_db
        self.init_admin_table()

    def init_admin_table(self):
        """Initialize admin table if it doesn't exist"""
        db_dir = os.path.dirname(self.user_db)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        with sqlite3.connect(self.user_db) as conn:
            cursor = conn.cursor()
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS admin (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT UNIQUE NOT NULL,
                    password_hash TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            conn.commit()

    def admin_count(self):
        with sqlite3.connect(self.user_db) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM admin")
            return cursor.fetchone()[0]

    def create_admin(self, email, password):
        email = (email or '').strip().lower()
        if not email or not password:
            raise ValidationError('Email and password are required')
        if len(password) < 6:
            raise ValidationError('Password must be at least 6 characters long')

        try:
            with sqlite3.connect(self.user_db) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO admin (email, password_hash)
                    VALUES (?, ?)
                """, (email, generate_password_hash(password)))
                conn.commit()
                return cursor.lastrowid
        except sqlite3.IntegrityError:
            raise ValidationError('An admin with this email already exists')

    def sign_in(self, email, password):
        try:
            with sqlite3.connect(self.user_db) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    SELECT id, email, password_hash FROM admin
                    WHERE email = ?
                """, (email.strip().lower(),))
                admin = cursor.fetchone()
        except sqlite3.Error:
            raise AuthError('Could not reach the admin database. Please try again.')

        if not admin or not check_password_hash(admin[2], password):
            raise AuthError('Invalid email or password')
        return {'uid': str(admin[0]), 'email': admin[1]}


class FirebaseAuth(AuthProvider):
    """Firebase email/password accounts via the Identity Toolkit REST API"""

    name = 'firebase'
    SIGN_IN_URL = 'https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword'

    ERROR_MESSAGES = {
        'EMAIL_NOT_FOUND': 'Invalid email or password',
        'INVALID_PASSWORD': 'Invalid email or password',
        'INVALID_LOGIN_CREDENTIALS': 'Invalid email or password',
        'INVALID_EMAIL': 'Please enter a valid email address',
        'USER_DISABLED': 'This account has been disabled',
        'TOO_MANY_ATTEMPTS_TRY_LATER': 'Too many attempts. Please try again later',
    }

    def __init__(self, api_key, timeout=10):
        self.api_key = api_key
        self.timeout = timeout

    def sign_in(self, email, password):
        if not self.api_key:
            raise ConfigurationError('FIREBASE_API_KEY is not configured')

        try:
            response = requests.post(
                self.SIGN_IN_URL,
                params={'key': self.api_key},
                json={'email': email, 'password': password, 'returnSecureToken': True},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException:
            raise AuthError('Network error: could not reach the sign-in service')

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.ok:
            code = (payload.get('error') or {}).get('message', '')
            # codes may carry a detail suffix: "TOO_MANY_ATTEMPTS_TRY_LATER : ..."
            code = code.split(' ')[0] if code else ''
            raise AuthError(self.ERROR_MESSAGES.get(code, 'Sign-in was rejected'))

        return {
            'uid': payload.get('localId'),
            'email': payload.get('email', email),
            'id_token': payload.get('idToken'),
        }
