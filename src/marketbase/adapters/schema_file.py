"""Declarative schema file loader.

Reads a bundled JSON schema description (by default ``pb_schema.json`` next to
the process, falling back to ``/pb_schema.json`` at the container root) and
turns it into `CollectionSpec` objects for the import mode.

File format: a JSON array of collection objects::

    [
      {
        "name": "shops",
        "listRule": "",
        "fields": [
          {"name": "name", "type": "text", "required": true},
          {"name": "owner", "type": "relation", "collection": "users",
           "maxSelect": 1}
        ]
      }
    ]

Relation targets (``collection``, or ``collectionId``) may be a collection name
or identifier; they are resolved against the store at import time.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from marketbase.domain.schema import AccessRules, CollectionSpec, FieldKind, FieldSpec

logger = logging.getLogger(__name__)

RULE_KEYS = {
    "listRule": "list_rule",
    "viewRule": "view_rule",
    "createRule": "create_rule",
    "updateRule": "update_rule",
    "deleteRule": "delete_rule",
}


class SchemaFileError(Exception):
    """Base class for schema file errors."""


class SchemaFileNotFoundError(SchemaFileError, FileNotFoundError):
    """None of the candidate schema file paths exists."""

    def __init__(self, candidates: Sequence[Path]) -> None:
        super().__init__(
            "Schema file not found; tried: " + ", ".join(str(p) for p in candidates)
        )
        self.candidates = list(candidates)


class InvalidSchemaFileError(SchemaFileError):
    """The schema file is not valid JSON or does not describe collections."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid schema file {path}: {reason}")
        self.path = path


def locate_schema_file(candidates: Sequence[Path]) -> Path:
    """Return the first existing path among `candidates`.

    Raises:
        SchemaFileNotFoundError: If none exists.
    """
    for path in candidates:
        if path.is_file():
            return path
        logger.debug("Schema file not at %s", path)
    raise SchemaFileNotFoundError(candidates)


def read_schema_file(candidates: Sequence[Path]) -> list[CollectionSpec]:
    """Locate, read and parse the schema file.

    Raises:
        SchemaFileNotFoundError: If no candidate exists.
        InvalidSchemaFileError: If the content is malformed.
    """
    path = locate_schema_file(candidates)
    logger.info("Reading schema from %s", path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidSchemaFileError(path, str(e)) from e
    return parse_schema(raw, path)


def parse_schema(raw: Any, path: Path) -> list[CollectionSpec]:
    """Convert decoded JSON into collection specs, in file order."""
    if not isinstance(raw, list):
        raise InvalidSchemaFileError(path, "top level must be an array")
    specs = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping) or not item.get("name"):
            raise InvalidSchemaFileError(path, f"collection #{index} has no name")
        try:
            specs.append(_parse_collection(item))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSchemaFileError(
                path, f"collection '{item['name']}': {e}"
            ) from e
    return specs


def _parse_collection(item: Mapping[str, Any]) -> CollectionSpec:
    rules = {
        attr: item[key] for key, attr in RULE_KEYS.items() if key in item
    }
    return CollectionSpec(
        name=item["name"],
        fields=tuple(_parse_field(f) for f in item.get("fields", [])),
        rules=AccessRules(**rules),
    )


def _parse_field(item: Mapping[str, Any]) -> FieldSpec:
    kind = FieldKind(item["type"])
    target = item.get("collection") or item.get("collectionId")
    return FieldSpec(
        name=item["name"],
        kind=kind,
        required=bool(item.get("required", False)),
        target=target if kind is FieldKind.RELATION else None,
        max_select=item.get("maxSelect"),
        cascade_delete=bool(item.get("cascadeDelete", False)),
        max_size=item.get("maxSize"),
        mime_types=tuple(item.get("mimeTypes") or ()),
    )
