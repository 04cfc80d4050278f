"""Errors raised while accepting readings from devices."""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for rejected ingestion requests."""


class MalformedInput(IngestionError):
    """Request body is not a JSON object."""


class EmptyPayload(IngestionError):
    """No metric fields remain after removing the device identifier."""
