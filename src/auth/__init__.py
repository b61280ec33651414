"""Authentication module for Microsoft Graph API."""

from src.auth.authenticator import AuthenticationError, GraphAuthenticator
from src.auth.record_cache import AuthRecordCache, AuthRecordCacheError

__all__ = [
    "GraphAuthenticator",
    "AuthenticationError",
    "AuthRecordCache",
    "AuthRecordCacheError",
]
