"""Core rules engine package for Ninety-Nine."""

__all__ = [
    "cards",
    "deck",
    "config",
    "errors",
    "phases",
    "state",
    "trick",
    "mechanics",
    "bidding",
    "scoring",
    "game",
    "snapshot",
    "service",
]
