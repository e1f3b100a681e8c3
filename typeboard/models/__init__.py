"""Data model exports."""

from .binding import CredentialBinding
from .join import JoinOutcome, JoinRequest, JoinStatus
from .profile import LeaderboardProfile
from .results import ProbeResult, QualifyingResult

__all__ = [
    "CredentialBinding",
    "JoinOutcome",
    "JoinRequest",
    "JoinStatus",
    "LeaderboardProfile",
    "ProbeResult",
    "QualifyingResult",
]
