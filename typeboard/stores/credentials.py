"""Credential store: the username <-> credential binding authority.

The keystore document holds two indices::

    {
      "byUser": {"<casefolded username>": {"username": "...", "credential": "..."}},
      "byHash": {"<sha256 of credential>": "<username>"}
    }

Both indices change inside one document transaction, so a caller never sees
one written without the other.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.log import get_logger, hash_prefix
from ..models.binding import CredentialBinding, hash_credential
from ..models.profile import normalize_username, username_key
from .documents import JsonDocument

logger = get_logger("stores.credentials")


def _empty() -> Dict[str, Any]:
    return {"byUser": {}, "byHash": {}}


def _coerce(data: Any) -> Dict[str, Any]:
    """Accept the legacy list layout (``[{username, apeKey}]``) as well."""

    if isinstance(data, list):
        converted = _empty()
        for row in data:
            row = row or {}
            username = normalize_username(row.get("username"))
            credential = row.get("apeKey") or row.get("credential")
            if not username or not credential:
                continue
            converted["byUser"][username_key(username)] = {
                "username": username,
                "credential": credential,
            }
            converted["byHash"][hash_credential(credential)] = username
        return converted
    if not isinstance(data, dict):
        return _empty()
    data.setdefault("byUser", {})
    data.setdefault("byHash", {})
    return data


def _retract_reverse(data: Dict[str, Any], key: str, credential: str) -> None:
    """Drop ``hash(credential)`` from byHash only if it still points at ``key``."""

    old_hash = hash_credential(credential or "")
    if username_key(data["byHash"].get(old_hash, "")) == key:
        del data["byHash"][old_hash]


class CredentialStore:
    """Durable bijection between usernames and upstream credentials."""

    def __init__(self, path: Path | str) -> None:
        self._doc = JsonDocument(path, _empty, _coerce)

    async def upsert_binding(self, username: str, credential: str) -> CredentialBinding:
        """Bind ``username`` to ``credential``, retracting any stale reverse entry."""

        username = normalize_username(username)
        key = username_key(username)
        new_hash = hash_credential(credential)

        async with self._doc.transaction() as data:
            by_user, by_hash = data["byUser"], data["byHash"]

            previous = by_user.get(key)
            if previous and previous.get("credential") != credential:
                _retract_reverse(data, key, previous.get("credential"))
                logger.info("Rotated credential for %s", username)

            # A credential anchors one username at a time; the newest binding wins.
            holder = by_hash.get(new_hash)
            if holder and username_key(holder) != key:
                by_user.pop(username_key(holder), None)
                logger.warning(
                    "Credential %s moved from %s to %s",
                    hash_prefix(new_hash),
                    holder,
                    username,
                )

            by_user[key] = {"username": username, "credential": credential}
            by_hash[new_hash] = username

        return CredentialBinding(username=username, credential=credential)

    async def bind_if_absent(
        self, username: str, credential: str
    ) -> Optional[CredentialBinding]:
        """Create a binding only when neither the username nor the credential is taken.

        Returns ``None`` when the binding was created, otherwise the binding
        that already owns the credential or the username.
        """

        username = normalize_username(username)
        new_hash = hash_credential(credential)

        async with self._doc.transaction() as data:
            by_user, by_hash = data["byUser"], data["byHash"]

            holder = by_hash.get(new_hash)
            existing = by_user.get(username_key(holder)) if holder else None
            if existing is None:
                existing = by_user.get(username_key(username))
            if existing is not None:
                return CredentialBinding(**existing)

            by_user[username_key(username)] = {"username": username, "credential": credential}
            by_hash[new_hash] = username

        logger.info("Bound %s to credential %s", username, hash_prefix(new_hash))
        return None

    async def get_binding(self, username: str) -> Optional[CredentialBinding]:
        data = await self._doc.read()
        entry = data["byUser"].get(username_key(username))
        if not entry or not entry.get("credential"):
            return None
        return CredentialBinding(**entry)

    async def get_credential(self, username: str) -> Optional[str]:
        binding = await self.get_binding(username)
        return binding.credential if binding else None

    async def find_username_by_credential_hash(self, credential_hash: str) -> Optional[str]:
        data = await self._doc.read()
        return data["byHash"].get(credential_hash) or None

    async def list_bindings(self) -> List[CredentialBinding]:
        data = await self._doc.read()
        return [
            CredentialBinding(**entry)
            for entry in data["byUser"].values()
            if entry.get("username") and entry.get("credential")
        ]

    async def delete_binding(self, username: str) -> bool:
        """Remove the forward entry, and the reverse entry if it still points here."""

        key = username_key(username)
        async with self._doc.transaction() as data:
            entry = data["byUser"].pop(key, None)
            if entry is not None:
                _retract_reverse(data, key, entry.get("credential"))

        if entry is None:
            return False
        logger.info("Deleted binding for %s", entry.get("username") or username)
        return True


__all__ = ["CredentialStore", "normalize_username"]
