"""Durable JSON-file stores."""

from .credentials import CredentialStore, normalize_username
from .documents import JsonDocument
from .profiles import ProfileStore

__all__ = ["CredentialStore", "JsonDocument", "ProfileStore", "normalize_username"]
