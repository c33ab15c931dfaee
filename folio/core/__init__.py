"""
Folio Core
==========

Core utilities and shared functionality for Folio modules.
"""

from .config import Config
from .database import DocumentStore, MemoryDocumentStore, SQLiteDocumentStore, Subscription
from .errors import (
    FolioError, ConfigurationError, AuthError, ValidationError,
    TransportError, VerificationError,
)
from .logging_service import LoggingService

__all__ = [
    'Config', 'DocumentStore', 'MemoryDocumentStore', 'SQLiteDocumentStore', 'Subscription',
    'FolioError', 'ConfigurationError', 'AuthError', 'ValidationError',
    'TransportError', 'VerificationError', 'LoggingService',
]
