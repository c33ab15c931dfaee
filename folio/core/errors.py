"""
Folio Errors
============

Failure taxonomy shared by the stores, editors and collaborators.
Every error carries a message that is safe to show to the admin user.
"""


class FolioError(Exception):
    """Base class for all Folio failures"""


class ConfigurationError(FolioError):
    """Required credentials or connection parameters are missing"""


class AuthError(FolioError):
    """Credentials rejected, session expired or auth backend unreachable"""


class ValidationError(FolioError):
    """Local pre-write check failed; nothing was sent to the database"""


class TransportError(FolioError):
    """Network or persistence failure during a read, write or delete"""


class VerificationError(FolioError):
    """A write reported success but reading it back returned a different value"""
