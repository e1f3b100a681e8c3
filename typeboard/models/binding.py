"""Credential binding records."""

from __future__ import annotations

import hashlib

from sqlmodel import SQLModel


def hash_credential(credential: str) -> str:
    """One-way hex digest used as the reverse lookup key."""

    return hashlib.sha256(str(credential).encode("utf-8")).hexdigest()


class CredentialBinding(SQLModel):
    """Forward entry of the keystore: a username and its upstream credential."""

    username: str
    credential: str

    @property
    def credential_hash(self) -> str:
        return hash_credential(self.credential)


__all__ = ["CredentialBinding", "hash_credential"]
