"""Snapshot validation for persisted classifier state.

A snapshot is a plain mapping holding exactly the fields in
:data:`STATE_KEYS`. It contains data only: JSON-compatible lists, dicts,
strings and numbers. Every field except ``options`` is mandatory on import;
``options`` falls back to the defaults when absent.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from .exceptions import SnapshotValidationError

STATE_KEYS: tuple[str, ...] = (
    "categories",
    "docCount",
    "totalDocuments",
    "vocabulary",
    "wordCount",
    "wordFrequencyCount",
    "options",
)

# Fields that may be a list or a {member: true} mapping
_COLLECTION_KEYS = ("categories", "vocabulary")
# Fields that must be mappings
_MAPPING_KEYS = ("docCount", "wordCount", "wordFrequencyCount")


def validate_snapshot(snapshot: Any) -> dict:
    """Check that ``snapshot`` carries every recognized field.

    Field shapes are checked, and every category must be a string with an
    entry in each per-category counter. The counter values themselves are
    trusted.

    Args:
        snapshot: Mapping produced by ``NaiveBayesClassifier.to_dict()``.

    Returns:
        A shallow copy restricted to :data:`STATE_KEYS`, with ``options``
        defaulted to an empty mapping.

    Raises:
        SnapshotValidationError: If the snapshot is not a mapping, or a
            field is missing or has the wrong shape. The error's ``field``
            attribute names the offending field.
    """
    if not isinstance(snapshot, Mapping):
        raise SnapshotValidationError(
            f"Snapshot must be a mapping, got {type(snapshot).__name__}"
        )

    validated: dict = {}
    for key in STATE_KEYS:
        value = snapshot.get(key)
        if key == "options":
            value = {} if value is None else value
        elif value is None:
            raise SnapshotValidationError(
                f"Snapshot is missing an expected field: '{key}'", field=key
            )
        validated[key] = value

    for key in _COLLECTION_KEYS:
        if not isinstance(validated[key], (list, tuple, Mapping)):
            raise SnapshotValidationError(
                f"Snapshot field '{key}' must be a list", field=key
            )

    for key in _MAPPING_KEYS + ("options",):
        if not isinstance(validated[key], Mapping):
            raise SnapshotValidationError(
                f"Snapshot field '{key}' must be a mapping", field=key
            )

    total = validated["totalDocuments"]
    if isinstance(total, bool) or not isinstance(total, int):
        raise SnapshotValidationError(
            f"Snapshot field 'totalDocuments' must be an integer, got {total!r}",
            field="totalDocuments",
        )

    for category in validated["categories"]:
        if not isinstance(category, str):
            raise SnapshotValidationError(
                f"Snapshot field 'categories' must hold strings, got {category!r}",
                field="categories",
            )
        for key in _MAPPING_KEYS:
            if category not in validated[key]:
                raise SnapshotValidationError(
                    f"Snapshot field '{key}' has no entry for category {category!r}",
                    field=key,
                )

    return validated


def parse_json(data: str | bytes | Mapping) -> Any:
    """Decode a JSON snapshot string; mappings are passed through."""
    if isinstance(data, (str, bytes)):
        try:
            return json.loads(data)
        except UnicodeDecodeError as e:
            raise SnapshotValidationError(f"Snapshot is not valid UTF-8: {e.reason}") from e
        except json.JSONDecodeError as e:
            raise SnapshotValidationError(f"Snapshot is not valid JSON: {e}") from e
    return data
