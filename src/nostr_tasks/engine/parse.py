# src/nostr_tasks/engine/parse.py

"""
Event and tag decoders.

Turns protocol events (and raw tag lists) into in-memory models.

Policies differ per object and are intentional:
- task metadata is permissive: unknown tag kinds and unparseable user
  references are skipped, while a malformed image or timestamp fails
  the whole decode;
- kanban columns are strict: one malformed `col` tag fails the board;
- tracker references are scanned independently for the first
  `tracked_item` and the first `workflow` label; tags that do not read
  as references are ignored.

Decoders stop at the first fatal condition and raise a CodecError.
"""

from __future__ import annotations

import logging
from typing import Callable, Final, Optional, Sequence, TypeVar

from .errors import (
    CannotGetWorkflowSpecificData,
    InvalidATag,
    InvalidTimestamp,
    InvalidUrl,
    MissingColumnContent,
    MissingColumnLabel,
    MissingColumns,
    MissingIdentifier,
    MissingTrackedItem,
    MissingWorkflow,
    NotAColumnTag,
    NotAKanbanBoard,
    WrongKind,
)
from .event import KIND_KANBAN_BOARD, KIND_TASK, KIND_TRACKER, Event, Tag, Tags, tags_of
from .model import (
    Color,
    CoordinateLabel,
    KanbanBoard,
    KanbanColumnDefinition,
    KanbanSpecificTrackerData,
    KanbanTrackerStatus,
    LabelledCoordinate,
    Task,
    TaskMetadata,
    TaskUserRole,
    Tracker,
)
from .primitives import U32_MAX, Coordinate, PublicKey, Timestamp, Url, parse_unsigned

log = logging.getLogger(__name__)

T = TypeVar("T")

WorkflowDataParser = Callable[[Event], T]


# ---------------------------------------------------------------------
# Tag names
# ---------------------------------------------------------------------

TAG_IDENTIFIER: Final[str] = "d"
TAG_TITLE: Final[str] = "title"
TAG_IMAGE: Final[str] = "image"
TAG_PUBLISHED_AT: Final[str] = "published_at"
TAG_DUE_AT: Final[str] = "due_at"
TAG_ARCHIVED: Final[str] = "archived"
TAG_HASHTAG: Final[str] = "t"
TAG_PUBLIC_KEY: Final[str] = "p"
TAG_DESCRIPTION: Final[str] = "description"
TAG_ALT: Final[str] = "alt"
TAG_COLUMN: Final[str] = "col"
TAG_RANK: Final[str] = "rank"
TAG_COORDINATE: Final[str] = "a"


# ---------------------------------------------------------------------
# Task metadata
# ---------------------------------------------------------------------

def parse_task_metadata(tags: Tags | Sequence[Tag]) -> TaskMetadata:
    """
    Decode task metadata from a tag list in a single pass.

    Repeated title/image/timestamp tags overwrite each other (last one
    wins). Tags of any other kind are ignored.
    """
    metadata = TaskMetadata()

    for tag in tags_of(tags):
        kind = tag.kind
        content = tag.content

        if kind == TAG_TITLE:
            if content is not None:
                metadata.set_title(content)

        elif kind == TAG_IMAGE:
            if content is not None:
                metadata.set_image(_parse_url(content))

        elif kind == TAG_PUBLISHED_AT:
            if content is not None:
                metadata.set_published_at(_parse_timestamp(content))

        elif kind == TAG_DUE_AT:
            if content is not None:
                metadata.set_due_at(_parse_timestamp(content))

        elif kind == TAG_ARCHIVED:
            # Presence is the signal; the payload is not inspected.
            metadata.set_archived(True)

        elif kind == TAG_HASHTAG:
            if content is not None:
                metadata.add_tag(content)

        elif kind == TAG_PUBLIC_KEY:
            user = _parse_user(tag)
            if user is not None:
                metadata.add_user(*user)

        else:
            log.debug("Ignoring tag of kind %r in task metadata", kind)

    return metadata


def _parse_url(raw: str) -> Url:
    try:
        return Url.parse(raw)
    except ValueError as e:
        raise InvalidUrl(raw) from e


def _parse_timestamp(raw: str) -> Timestamp:
    try:
        return Timestamp.parse(raw)
    except ValueError as e:
        raise InvalidTimestamp(raw) from e


def _parse_user(tag: Tag) -> Optional[tuple[PublicKey, TaskUserRole]]:
    raw = tag.content
    if raw is None:
        return None

    try:
        pubkey = PublicKey.parse(raw)
    except ValueError:
        log.debug("Dropping user reference with invalid public key %r", raw)
        return None

    return pubkey, TaskUserRole.parse(tag.get(2))


# ---------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------

def parse_task(event: Event) -> Task:
    """
    Decode a task event.

    Raises WrongKind, MissingIdentifier, or any task metadata error.
    """
    if event.kind != KIND_TASK:
        raise WrongKind(event.kind)

    task_id = _first_identifier(event.tags)
    if task_id is None:
        raise MissingIdentifier()

    return Task(
        id=task_id,
        description=event.content,
        metadata=parse_task_metadata(event.tags),
    )


def _first_identifier(tags: Tags) -> Optional[str]:
    """Content of the first `d` tag that has one."""
    for tag in tags.filter(TAG_IDENTIFIER):
        if tag.content is not None:
            return tag.content
    return None


# ---------------------------------------------------------------------
# Kanban
# ---------------------------------------------------------------------

def parse_kanban_column(tag: Tag) -> KanbanColumnDefinition:
    """
    Decode a `["col", id, label, color?]` tag.

    A missing id or label is an error; an absent or unrecognised colour
    is not.
    """
    if tag.kind != TAG_COLUMN:
        raise NotAColumnTag()

    column_id = tag.content
    if column_id is None:
        raise MissingColumnContent()

    label = tag.get(2)
    if label is None:
        raise MissingColumnLabel()

    color = None
    raw_color = tag.get(3)
    if raw_color is not None:
        color = Color.parse(raw_color)
        if color is None:
            log.debug("Ignoring unrecognised colour %r on column %r", raw_color, column_id)

    return KanbanColumnDefinition(id=column_id, label=label, color=color)


def parse_kanban_board(event: Event) -> KanbanBoard:
    """
    Decode a kanban board event.

    Every `col` tag must decode; at least one is required. Maintainers
    default to the event author when no valid `p` tag is present.
    """
    if event.kind != KIND_KANBAN_BOARD:
        raise NotAKanbanBoard(event.kind, KIND_KANBAN_BOARD)

    board_id = _first_content(event.tags, TAG_IDENTIFIER)
    if board_id is None:
        raise MissingIdentifier("Missing required 'd' tag for board identifier")

    columns = [parse_kanban_column(tag) for tag in event.tags.filter(TAG_COLUMN)]
    if not columns:
        raise MissingColumns()

    maintainers: list[PublicKey] = []
    for tag in event.tags.filter(TAG_PUBLIC_KEY):
        raw = tag.content
        if raw is None:
            continue
        try:
            maintainers.append(PublicKey.from_hex(raw))
        except ValueError:
            log.debug("Dropping maintainer with invalid public key %r", raw)

    if not maintainers:
        maintainers = [event.author]

    return KanbanBoard(
        id=board_id,
        title=_first_content(event.tags, TAG_TITLE),
        description=_first_content(event.tags, TAG_DESCRIPTION),
        alt=_first_content(event.tags, TAG_ALT),
        columns=columns,
        maintainers=maintainers,
    )


def _first_content(tags: Tags, kind: str) -> Optional[str]:
    """Content of the first tag of `kind` (None if that tag has none)."""
    tag = tags.find(kind)
    return tag.content if tag is not None else None


def parse_kanban_tracker_data(event: Event) -> KanbanSpecificTrackerData:
    """
    Decode the kanban payload of a tracker event.

    Status comes from the content (empty means DEFER). An absent or
    invalid rank is None, not an error. Task metadata errors propagate.
    """
    rank = None
    raw_rank = _first_content(event.tags, TAG_RANK)
    if raw_rank is not None:
        try:
            rank = parse_unsigned(raw_rank, maximum=U32_MAX)
        except ValueError:
            log.debug("Ignoring invalid rank %r", raw_rank)

    return KanbanSpecificTrackerData(
        status=KanbanTrackerStatus.from_content(event.content),
        rank=rank,
        task_metadata=parse_task_metadata(event.tags),
    )


# ---------------------------------------------------------------------
# Labelled references
# ---------------------------------------------------------------------

def parse_a_tag(tag: Tag) -> LabelledCoordinate:
    """
    Read a tag as `[kind, coordinate, label?]`.

    Any label string is accepted; only a missing or unparseable
    coordinate raises InvalidATag.
    """
    if len(tag) < 2:
        raise InvalidATag()

    try:
        coordinate = Coordinate.parse(tag.values[1])
    except ValueError as e:
        raise InvalidATag(f"invalid a-tag: {tag.values[1]!r}") from e

    return LabelledCoordinate(coordinate=coordinate, label=CoordinateLabel.parse(tag.get(2)))


def find_labelled_coordinate(tags: Tags, label: CoordinateLabel) -> Optional[Coordinate]:
    """First coordinate (in tag order) carrying `label`."""
    for tag in tags:
        try:
            labelled = parse_a_tag(tag)
        except InvalidATag:
            log.debug("Tag %r is not a labelled reference", tag.kind)
            continue
        if labelled.label == label:
            return labelled.coordinate
    return None


# ---------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------

def parse_tracker(event: Event, parse_data: WorkflowDataParser[T]) -> Tracker[T]:
    """
    Decode a tracker event.

    `parse_data` builds the workflow-specific payload from the same
    event; any exception it raises is reported as
    CannotGetWorkflowSpecificData (chained as the cause).
    """
    if event.kind != KIND_TRACKER:
        raise WrongKind(event.kind, KIND_TRACKER)

    identifier = event.tags.find(TAG_IDENTIFIER)
    if identifier is None or identifier.content is None:
        raise MissingIdentifier()

    tracked_item = find_labelled_coordinate(event.tags, CoordinateLabel.TRACKED_ITEM)
    if tracked_item is None:
        raise MissingTrackedItem()

    workflow = find_labelled_coordinate(event.tags, CoordinateLabel.WORKFLOW)
    if workflow is None:
        raise MissingWorkflow()

    try:
        data = parse_data(event)
    except Exception as e:
        raise CannotGetWorkflowSpecificData() from e

    return Tracker(
        id=identifier.content,
        tracked_item=tracked_item,
        workflow=workflow,
        workflow_specific_data=data,
    )


def parse_kanban_tracker(event: Event) -> Tracker[KanbanSpecificTrackerData]:
    return parse_tracker(event, parse_kanban_tracker_data)
