"""Join/bind workflow.

A join request resolves to exactly one :class:`JoinOutcome`:

* region not admitted -> ``rejected_region`` (no store access)
* malformed username/credential -> ``rejected_bad_input`` (no store access)
* upstream says the credential is invalid -> ``rejected_unauthorized``
* credential already bound -> re-login as the bound username, whatever was typed
* username taken by another credential -> ``rejected_conflict``
* username bound to this credential -> re-login
* otherwise -> bind both indices, score, ``success_created``

An indeterminate probe fails open. Any branch that succeeds writes a fresh
profile first; if scoring fails the join fails with a server error and the
binding stays for the next sweep to score.
"""

from __future__ import annotations

import re
from typing import Tuple

from ..core.config import ALLOWED_REGION
from ..core.errors import (
    BadInput,
    Conflict,
    NoQualifyingResult,
    RegionDenied,
    TypeboardError,
    Unauthorized,
    UpstreamAuthRejected,
)
from ..core.log import get_logger, hash_prefix
from ..core.time import isoformat_z
from ..models.binding import hash_credential
from ..models.join import JoinOutcome, JoinStatus
from ..models.profile import LeaderboardProfile
from ..models.results import ProbeResult
from ..models.profile import normalize_username
from ..stores.credentials import CredentialStore
from ..stores.profiles import ProfileStore
from .scores import ScoreSource
from .validator import Validator

logger = get_logger("services.join")

USERNAME_RE = re.compile(r"^[\w.\-]{3,20}$")
MAX_CREDENTIAL_LENGTH = 180
# Printable ASCII only; the credential travels in an HTTP header.
_CREDENTIAL_RE = re.compile(r"^[\x21-\x7e]+$")


def validate_join_input(username: str | None, credential: str | None) -> Tuple[str, str]:
    """Return the normalized pair or raise :class:`BadInput`."""

    username = normalize_username(username)
    credential = (credential or "").strip()

    if not username or not credential:
        raise BadInput("Both username and credential are required.")
    if not USERNAME_RE.match(username):
        raise BadInput(
            "Username must be 3-20 characters: letters, digits, '_', '.' or '-'."
        )
    if len(credential) > MAX_CREDENTIAL_LENGTH or not _CREDENTIAL_RE.match(credential):
        raise BadInput("Credential looks malformed.")
    return username, credential


def _redact(text: str, secret: str) -> str:
    return text.replace(secret, "***") if secret else text


class JoinWorkflow:
    """Orchestrates the stores, the validator and the score source for a join."""

    def __init__(
        self,
        credentials: CredentialStore,
        profiles: ProfileStore,
        validator: Validator,
        scores: ScoreSource,
        *,
        region: str = ALLOWED_REGION,
    ) -> None:
        self.credentials = credentials
        self.profiles = profiles
        self.validator = validator
        self.scores = scores
        self.region = region

    async def refresh_profile(self, username: str, credential: str) -> LeaderboardProfile:
        """Fetch the best qualifying result and upsert the profile."""

        result = await self.scores.fetch_best(username, credential)
        profile = LeaderboardProfile(
            username=username,
            score=result.score,
            accuracy=result.accuracy,
            timestamp=isoformat_z(),
            region=self.region,
        )
        return await self.profiles.upsert(profile)

    async def join(
        self, username: str | None, credential: str | None, *, admitted: bool
    ) -> JoinOutcome:
        try:
            if not admitted:
                raise RegionDenied()
            return await self._join(username, credential)
        except RegionDenied as exc:
            return JoinOutcome(status=JoinStatus.REJECTED_REGION, message=exc.message)
        except BadInput as exc:
            return JoinOutcome(status=JoinStatus.REJECTED_BAD_INPUT, message=exc.message)
        except (Unauthorized, UpstreamAuthRejected):
            return JoinOutcome(
                status=JoinStatus.REJECTED_UNAUTHORIZED, message=Unauthorized.message
            )
        except Conflict as exc:
            return JoinOutcome(status=JoinStatus.REJECTED_CONFLICT, message=exc.message)
        except NoQualifyingResult as exc:
            logger.warning("Join could not score %s: %s", normalize_username(username), exc.message)
            return JoinOutcome(status=JoinStatus.ERROR_SERVER, message=exc.message)
        except TypeboardError as exc:
            logger.error("Join failed: %s", _redact(exc.message, (credential or "").strip()))
            return JoinOutcome(status=JoinStatus.ERROR_SERVER, message="Server error while joining.")
        except Exception as exc:
            logger.error(
                "Join failed: %s: %s",
                type(exc).__name__,
                _redact(str(exc), (credential or "").strip()),
            )
            return JoinOutcome(status=JoinStatus.ERROR_SERVER, message="Server error while joining.")

    async def _join(self, username: str | None, credential: str | None) -> JoinOutcome:
        username, credential = validate_join_input(username, credential)
        credential_hash = hash_credential(credential)

        verdict = await self.validator.probe(credential)
        if verdict is ProbeResult.INVALID:
            raise Unauthorized()
        if verdict is ProbeResult.INDETERMINATE:
            logger.warning(
                "Upstream inconclusive for %s; admitting join", hash_prefix(credential_hash)
            )

        bound = await self.credentials.find_username_by_credential_hash(credential_hash)
        if bound:
            return await self._relogin(bound, credential)

        binding = await self.credentials.get_binding(username)
        if binding is not None or await self.profiles.get(username) is not None:
            if binding is None or binding.credential_hash != credential_hash:
                raise Conflict()
            return await self._relogin(binding.username, credential)

        existing = await self.credentials.bind_if_absent(username, credential)
        if existing is not None:
            # Lost a race with a concurrent join for the same name or key.
            if existing.credential_hash != credential_hash:
                raise Conflict()
            return await self._relogin(existing.username, credential)

        await self.refresh_profile(username, credential)
        logger.info("Registered %s", username)
        return JoinOutcome(status=JoinStatus.SUCCESS_CREATED, username=username)

    async def _relogin(self, username: str, credential: str) -> JoinOutcome:
        await self.refresh_profile(username, credential)
        logger.info("Re-login for %s", username)
        return JoinOutcome(status=JoinStatus.SUCCESS_RELOGIN, username=username)


__all__ = ["JoinWorkflow", "MAX_CREDENTIAL_LENGTH", "USERNAME_RE", "validate_join_input"]
