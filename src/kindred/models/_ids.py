"""Identifier helpers shared by the ORM models."""

import uuid


def new_id() -> str:
    """Return a fresh opaque row identifier."""
    return str(uuid.uuid4())
