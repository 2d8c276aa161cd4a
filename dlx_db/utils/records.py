"""Helpers for preparing caller-supplied records for writing."""

import uuid
from typing import Any, Dict, Mapping


def with_id(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a shallow copy of `record` that has an `id`.

    A new UUID4 string is assigned when the record has no id. The caller's
    object is never modified; the assigned id is visible on the copy.
    """
    prepared = dict(record)
    if not prepared.get("id"):
        prepared["id"] = str(uuid.uuid4())
    return prepared


def without_id(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy of `record` with any `id` removed."""
    prepared = dict(record)
    prepared.pop("id", None)
    return prepared
