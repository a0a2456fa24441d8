# src/nostr_tasks/engine/event.py

"""
Protocol events and tags.

An event is an authored record with a numeric kind, a free-text content
body and an ordered list of tags. A tag is a non-empty list of strings
whose first value is the tag kind.

This module is codec-agnostic: it knows nothing about tasks, boards or
trackers. Signing is out of scope; events built here are unsigned and
carry only their NIP-01 id.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Final, Iterable, Iterator, Optional, Sequence

from .primitives import PublicKey, Timestamp


# ---------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------

KIND_TEXT_NOTE: Final[int] = 1
KIND_TASK: Final[int] = 35001
KIND_KANBAN_BOARD: Final[int] = 35002
KIND_TRACKER: Final[int] = 35003


# ---------------------------------------------------------------------
# Tag
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Tag:
    """
    A single tag: `(kind, *values)`.

    `content` is the first value after the kind, which is where most
    tags keep their payload.
    """

    values: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("tag must have at least a kind")
        for v in self.values:
            if not isinstance(v, str):
                raise ValueError(f"tag values must be strings, got {type(v).__name__}")

    @classmethod
    def parse(cls, values: Iterable[str]) -> Tag:
        return cls(tuple(values))

    @classmethod
    def custom(cls, kind: str, *values: str) -> Tag:
        return cls((kind, *values))

    @property
    def kind(self) -> str:
        return self.values[0]

    @property
    def content(self) -> Optional[str]:
        return self.get(1)

    def get(self, index: int) -> Optional[str]:
        """Return the value at `index` (0 is the kind), or None."""
        if 0 <= index < len(self.values):
            return self.values[index]
        return None

    def as_list(self) -> list[str]:
        return list(self.values)

    def __len__(self) -> int:
        return len(self.values)


# ---------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Tags:
    """
    Ordered, immutable tag list.
    """

    items: tuple[Tag, ...] = ()

    @classmethod
    def parse(cls, lists: Iterable[Iterable[str]]) -> Tags:
        return cls(tuple(Tag.parse(values) for values in lists))

    @classmethod
    def from_list(cls, tags: Iterable[Tag]) -> Tags:
        return cls(tuple(tags))

    def find(self, kind: str) -> Optional[Tag]:
        """Return the first tag of the given kind."""
        for tag in self.items:
            if tag.kind == kind:
                return tag
        return None

    def filter(self, kind: str) -> Iterator[Tag]:
        return (tag for tag in self.items if tag.kind == kind)

    def as_lists(self) -> list[list[str]]:
        return [tag.as_list() for tag in self.items]

    def __iter__(self) -> Iterator[Tag]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Tag:
        return self.items[index]


# ---------------------------------------------------------------------
# Event
# ---------------------------------------------------------------------

def compute_event_id(
    pubkey: PublicKey,
    created_at: Timestamp,
    kind: int,
    tags: Tags,
    content: str,
) -> str:
    """
    NIP-01 event id: sha256 over the compact JSON serialisation of
    `[0, pubkey, created_at, kind, tags, content]`.
    """
    payload = [0, str(pubkey), created_at.secs, kind, tags.as_lists(), content]
    data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class Event:
    """
    An authored protocol event.

    `sig` is carried through untouched; it is never produced or checked
    here.
    """

    id: str
    pubkey: PublicKey
    created_at: Timestamp
    kind: int
    tags: Tags
    content: str
    sig: Optional[str] = None

    @property
    def author(self) -> PublicKey:
        return self.pubkey

    def verify_id(self) -> bool:
        return self.id == compute_event_id(
            self.pubkey, self.created_at, self.kind, self.tags, self.content
        )


# ---------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------

@dataclass(slots=True)
class EventBuilder:
    """
    Accumulates kind, content and tags for an event that is yet to be
    authored.
    """

    kind: int
    content: str = ""
    tags: list[Tag] = field(default_factory=list)

    def tag(self, tag: Tag) -> EventBuilder:
        self.tags.append(tag)
        return self

    def add_tags(self, tags: Iterable[Tag]) -> EventBuilder:
        self.tags.extend(tags)
        return self

    def build(self, pubkey: PublicKey, created_at: Optional[Timestamp] = None) -> Event:
        """
        Produce an unsigned event authored by `pubkey`.

        `created_at` defaults to the current time.
        """
        ts = created_at if created_at is not None else Timestamp.now()
        tags = Tags.from_list(self.tags)
        return Event(
            id=compute_event_id(pubkey, ts, self.kind, tags, self.content),
            pubkey=pubkey,
            created_at=ts,
            kind=self.kind,
            tags=tags,
            content=self.content,
        )


def tags_of(source: Tags | Sequence[Tag]) -> Tags:
    """Accept either a Tags collection or a plain sequence of Tag."""
    if isinstance(source, Tags):
        return source
    return Tags.from_list(source)
