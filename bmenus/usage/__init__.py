"""Command usage tracking."""

from .store import UsageEntry, UsageStore, UsageTable

__all__ = ["UsageEntry", "UsageStore", "UsageTable"]
