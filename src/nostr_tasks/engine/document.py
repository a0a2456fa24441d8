# src/nostr_tasks/engine/document.py

"""
YAML event documents.

Reads and writes events as human-editable YAML mappings using the
NIP-01 field names:

    id: <hex>            (optional on read; computed when absent)
    pubkey: <hex>
    created_at: <int>
    kind: <int>
    tags: [[d, my-task], [title, Example]]
    content: <str>
    sig: <hex>           (optional, carried through)

Relay-style JSON events load through the same functions.

This module performs *structural* validation only; tag semantics are
the decoders' job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Optional

import yaml

from .event import Event, Tags, compute_event_id
from .primitives import PublicKey, Timestamp


DOCUMENT_KEYS: Final[tuple[str, ...]] = (
    "id",
    "pubkey",
    "created_at",
    "kind",
    "tags",
    "content",
    "sig",
)


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DocumentError(Exception):
    """
    Raised when an event document is syntactically or structurally invalid.
    """

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def render_event_document(event: Event) -> str:
    """
    Render an event as a YAML mapping (NIP-01 key order).
    """
    data: dict[str, Any] = {
        "id": event.id,
        "pubkey": str(event.pubkey),
        "created_at": event.created_at.secs,
        "kind": event.kind,
        "tags": event.tags.as_lists(),
        "content": event.content,
    }
    if event.sig is not None:
        data["sig"] = event.sig
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def parse_event_document(text: str, path: str = "<string>") -> Event:
    """
    Parse a single YAML (or JSON) event document.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentError(path, f"Invalid YAML: {e}") from e

    return _event_from_mapping(path, data)


def load_event_documents(text: str, path: str = "<string>") -> list[Event]:
    """
    Parse a multi-document YAML stream (documents separated by `---`).

    Empty documents are skipped.
    """
    try:
        docs = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise DocumentError(path, f"Invalid YAML: {e}") from e

    events: list[Event] = []
    for i, data in enumerate(docs, start=1):
        if data is None:
            continue
        events.append(_event_from_mapping(f"{path}[{i}]", data))
    return events


# ---------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------

def _event_from_mapping(path: str, data: Any) -> Event:
    if not isinstance(data, dict):
        raise DocumentError(path, "Document root must be a mapping/dictionary")

    unknown = sorted(str(k) for k in data if k not in DOCUMENT_KEYS)
    if unknown:
        raise DocumentError(path, f"Unknown key(s): {', '.join(unknown)}")

    kind = _require_int_field(path, data, "kind")
    created_at = _require_int_field(path, data, "created_at")
    pubkey = _parse_pubkey(path, data)
    content = _optional_str_field(path, data, "content", default="")
    tags = _parse_tags(path, data)
    sig = _optional_str_field(path, data, "sig", default=None)

    try:
        ts = Timestamp.from_secs(created_at)
    except ValueError as e:
        raise DocumentError(path, f"Invalid created_at: {created_at}") from e

    event_id = _optional_str_field(path, data, "id", default=None)
    if event_id is None:
        event_id = compute_event_id(pubkey, ts, kind, tags, content)

    return Event(
        id=event_id,
        pubkey=pubkey,
        created_at=ts,
        kind=kind,
        tags=tags,
        content=content,
        sig=sig,
    )


def _require_int_field(path: str, data: dict[str, Any], key: str) -> int:
    if key not in data:
        raise DocumentError(path, f"Missing required key: {key}")

    value = data[key]
    # bool is an int subclass; `kind: true` is not a kind.
    if not isinstance(value, int) or isinstance(value, bool):
        raise DocumentError(path, f"Key '{key}' must be an integer")
    return value


def _optional_str_field(
    path: str,
    data: dict[str, Any],
    key: str,
    *,
    default: Optional[str],
) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise DocumentError(path, f"Key '{key}' must be a string")
    return value


def _parse_pubkey(path: str, data: dict[str, Any]) -> PublicKey:
    raw = _optional_str_field(path, data, "pubkey", default=None)
    if raw is None:
        raise DocumentError(path, "Missing required key: pubkey")

    try:
        return PublicKey.parse(raw)
    except ValueError as e:
        raise DocumentError(path, f"Invalid pubkey: '{raw}'") from e


def _parse_tags(path: str, data: dict[str, Any]) -> Tags:
    raw = data.get("tags", [])
    if raw is None:
        return Tags()

    if not isinstance(raw, list):
        raise DocumentError(path, "Key 'tags' must be a list")

    out: list[list[str]] = []
    for i, item in enumerate(raw):
        if not isinstance(item, list) or not item:
            raise DocumentError(path, f"tags[{i}] must be a non-empty list")
        for j, value in enumerate(item):
            if not isinstance(value, str):
                raise DocumentError(path, f"tags[{i}][{j}] must be a string")
        out.append(item)

    return Tags.parse(out)
