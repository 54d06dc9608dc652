"""Shared column helpers for the ORM models."""

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Primary keys are UUID4 strings generated application-side."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
