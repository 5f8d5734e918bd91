"""Normalization of Strapi payloads into flat records.

Strapi returns records either wrapped in an envelope (``{"id", "attributes"}``,
v4 style) or already flattened (``{"id", ...fields}``, v5 style). Relations are
nested envelopes holding one record or a list of records under ``data``. The
helpers here accept every shape without knowing the backend version up front
and never raise on malformed input.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

Record = dict[str, object]

MISSING_ID = 0

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MissingRecord:
    """Absent or malformed raw value."""

    raw: object


@dataclass(frozen=True)
class EnvelopedRecord:
    """Record whose fields live under ``attributes``."""

    id: object
    attributes: Mapping[str, object]


@dataclass(frozen=True)
class FlatRecord:
    """Record whose fields sit next to its ``id``."""

    fields: Mapping[str, object]


RawRecord = MissingRecord | EnvelopedRecord | FlatRecord


def classify_record(raw: object) -> RawRecord:
    """Tag a raw payload value with its representation."""
    if not isinstance(raw, Mapping):
        return MissingRecord(raw)
    if "id" in raw and "attributes" in raw:
        attributes = raw["attributes"]
        if not isinstance(attributes, Mapping):
            attributes = {}
        return EnvelopedRecord(id=raw["id"], attributes=attributes)
    return FlatRecord(fields=raw)


def normalize_record(raw: object) -> Record:
    """Return a flat ``{id, ...fields}`` record.

    Absent or malformed values yield ``{"id": 0}`` so callers can check
    ``record["id"] == 0`` for "missing".
    """
    tagged = classify_record(raw)
    if isinstance(tagged, EnvelopedRecord):
        record: Record = {"id": tagged.id}
        record.update(
            (key, value) for key, value in tagged.attributes.items() if key != "id"
        )
        return record
    if isinstance(tagged, FlatRecord):
        return dict(tagged.fields)
    if tagged.raw is not None:
        _logger.warning("Invalid data for normalization: %r", tagged.raw)
    return {"id": MISSING_ID}


def normalize_records(raw: object) -> list[Record]:
    """Normalize a list of raw records element-wise, preserving order."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        _logger.warning("Invalid data array for normalization: %r", raw)
        return []
    return [normalize_record(item) for item in raw]


def get_relation(relation: object) -> Record | None:
    """Resolve a single relation, or ``None`` when no relation is set."""
    if not isinstance(relation, Mapping):
        return None
    if "data" in relation:
        payload = relation["data"]
        if payload is None:
            return None
        return normalize_record(payload)
    if "id" in relation:
        return normalize_record(relation)
    return None


def get_relation_array(relation: object) -> list[Record]:
    """Resolve a to-many relation into a list of flat records."""
    if isinstance(relation, list):
        return normalize_records(relation)
    if not isinstance(relation, Mapping):
        return []
    return normalize_records(relation.get("data"))


def is_missing(record: Record | None) -> bool:
    """Return True for ``None`` or the ``{"id": 0}`` sentinel."""
    return record is None or not record.get("id")
