"""Exceptions raised by the reading store backends."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for backend failures (throttling, network, auth, disk)."""


class StoreWriteError(StoreError):
    """The backend rejected or failed a write."""


class StoreReadError(StoreError):
    """The backend failed a query or scan."""
