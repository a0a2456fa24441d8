# src/nostr_tasks/engine/render.py

"""
Event and tag encoders.

Turns in-memory models into tag lists and EventBuilder instances.
Tag order is fixed per object so the same input always produces the
same tags; decoding the result gives back an equal object.

This module is encode-only: it never inspects events.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from .event import KIND_KANBAN_BOARD, KIND_TASK, KIND_TRACKER, EventBuilder, Tag
from .model import (
    CoordinateLabel,
    KanbanBoard,
    KanbanColumnDefinition,
    KanbanSpecificTrackerData,
    LabelledCoordinate,
    Task,
    TaskMetadata,
    Tracker,
)
from .parse import (
    TAG_ALT,
    TAG_ARCHIVED,
    TAG_COLUMN,
    TAG_COORDINATE,
    TAG_DESCRIPTION,
    TAG_DUE_AT,
    TAG_HASHTAG,
    TAG_IDENTIFIER,
    TAG_IMAGE,
    TAG_PUBLIC_KEY,
    TAG_PUBLISHED_AT,
    TAG_RANK,
    TAG_TITLE,
)

T = TypeVar("T")

WorkflowDataRenderer = Callable[[T], tuple[str, list[Tag]]]


# ---------------------------------------------------------------------
# Task metadata
# ---------------------------------------------------------------------

def task_metadata_to_tags(metadata: TaskMetadata) -> list[Tag]:
    """
    Encode task metadata.

    Order: title, image, published_at, due_at, archived, hashtags,
    user references. `archived` is only written when True.
    """
    tags: list[Tag] = []

    if metadata.title is not None:
        tags.append(Tag.custom(TAG_TITLE, metadata.title))

    if metadata.image is not None:
        tags.append(Tag.custom(TAG_IMAGE, str(metadata.image)))

    if metadata.published_at is not None:
        tags.append(Tag.custom(TAG_PUBLISHED_AT, str(metadata.published_at)))

    if metadata.due_at is not None:
        tags.append(Tag.custom(TAG_DUE_AT, str(metadata.due_at)))

    if metadata.archived:
        tags.append(Tag.custom(TAG_ARCHIVED, "true"))

    for hashtag in metadata.tags:
        tags.append(Tag.custom(TAG_HASHTAG, hashtag))

    for pubkey, role in metadata.users:
        role_value = role.to_tag_value()
        if role_value is None:
            tags.append(Tag.custom(TAG_PUBLIC_KEY, str(pubkey)))
        else:
            tags.append(Tag.custom(TAG_PUBLIC_KEY, str(pubkey), role_value))

    return tags


# ---------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------

def task_to_event_builder(task: Task) -> EventBuilder:
    """
    Encode a task as `d` tag + metadata tags, content = description.

    Raises MissingIdentifier when the task id is empty.
    """
    task.validate()

    return (
        EventBuilder(KIND_TASK, task.description)
        .tag(Tag.custom(TAG_IDENTIFIER, task.id))
        .add_tags(task_metadata_to_tags(task.metadata))
    )


# ---------------------------------------------------------------------
# Kanban
# ---------------------------------------------------------------------

def kanban_column_to_tag(column: KanbanColumnDefinition) -> Tag:
    if column.color is None:
        return Tag.custom(TAG_COLUMN, column.id, column.label)
    return Tag.custom(TAG_COLUMN, column.id, column.label, str(column.color))


def kanban_board_to_event_builder(board: KanbanBoard) -> EventBuilder:
    """
    Encode a board: d, title?, description?, alt?, one `col` per
    column, one `p` per maintainer. Content is empty.
    """
    board.validate()

    builder = EventBuilder(KIND_KANBAN_BOARD, "").tag(Tag.custom(TAG_IDENTIFIER, board.id))

    for kind, value in (
        (TAG_TITLE, board.title),
        (TAG_DESCRIPTION, board.description),
        (TAG_ALT, board.alt),
    ):
        if value is not None:
            builder.tag(Tag.custom(kind, value))

    builder.add_tags(kanban_column_to_tag(col) for col in board.columns)
    builder.add_tags(Tag.custom(TAG_PUBLIC_KEY, str(pk)) for pk in board.maintainers)
    return builder


def kanban_tracker_data_to_content_and_tags(
    data: KanbanSpecificTrackerData,
) -> tuple[str, list[Tag]]:
    tags: list[Tag] = []
    if data.rank is not None:
        tags.append(Tag.custom(TAG_RANK, str(data.rank)))
    tags.extend(task_metadata_to_tags(data.task_metadata))
    return data.status.to_content(), tags


# ---------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------

def labelled_coordinate_to_tag(labelled: LabelledCoordinate) -> Tag:
    if labelled.label == CoordinateLabel.NONE:
        return Tag.custom(TAG_COORDINATE, str(labelled.coordinate))
    return Tag.custom(TAG_COORDINATE, str(labelled.coordinate), str(labelled.label))


def tracker_to_event_builder(
    tracker: Tracker[T],
    render_data: WorkflowDataRenderer[T],
) -> EventBuilder:
    """
    Encode a tracker: d, tracked item reference, workflow reference,
    then whatever `render_data` returns for the payload.
    """
    tracker.validate()

    content, data_tags = render_data(tracker.workflow_specific_data)

    return (
        EventBuilder(KIND_TRACKER, content)
        .tag(Tag.custom(TAG_IDENTIFIER, tracker.id))
        .tag(labelled_coordinate_to_tag(
            LabelledCoordinate(tracker.tracked_item, CoordinateLabel.TRACKED_ITEM)
        ))
        .tag(labelled_coordinate_to_tag(
            LabelledCoordinate(tracker.workflow, CoordinateLabel.WORKFLOW)
        ))
        .add_tags(data_tags)
    )


def kanban_tracker_to_event_builder(tracker: Tracker[KanbanSpecificTrackerData]) -> EventBuilder:
    return tracker_to_event_builder(tracker, kanban_tracker_data_to_content_and_tags)
