"""Region-restricted typing-speed leaderboard service."""

__version__ = "0.3.0"
