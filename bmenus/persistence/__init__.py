"""Durable storage for usage data."""

from .usage_file import UsageFile

__all__ = ["UsageFile"]
