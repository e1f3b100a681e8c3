"""Service layer: upstream access, region gating, join and refresh logic."""

from .join import JoinWorkflow, validate_join_input
from .leaderboard import rank_profiles
from .region import GeoLocator, RegionGate
from .scores import DemoScoreSource, ScoreSource, UpstreamScoreSource
from .sweep import RefreshSweep, SweepReport
from .throttle import JoinThrottle
from .upstream import MonkeytypeClient
from .validator import CredentialValidator, DemoValidator, Validator

__all__ = [
    "CredentialValidator",
    "DemoScoreSource",
    "DemoValidator",
    "GeoLocator",
    "JoinThrottle",
    "JoinWorkflow",
    "MonkeytypeClient",
    "RefreshSweep",
    "RegionGate",
    "ScoreSource",
    "SweepReport",
    "UpstreamScoreSource",
    "Validator",
    "rank_profiles",
    "validate_join_input",
]
