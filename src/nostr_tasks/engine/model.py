# src/nostr_tasks/engine/model.py

"""
Core domain models.

This module defines the in-memory representations of tasks, kanban
boards and workflow trackers, along with their core invariants.

Open-ended string variants (user roles, colours, coordinate labels,
tracker status) are immutable value objects wrapping their wire string:
known values are exposed as class constants, anything else is kept
verbatim. Ordering follows the wrapped string.

No tag encoding or decoding should happen here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Final, Generic, Iterable, Optional, TypeVar

from .errors import MissingColumns, MissingIdentifier
from .primitives import Coordinate, PublicKey, Timestamp, Url


# ---------------------------------------------------------------------
# TaskUserRole
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True, order=True)
class TaskUserRole:
    """
    Role of a user referenced by a task.

    "assignee" and "client" are the recognised roles. Any other
    non-empty string is a custom role. The empty value is the "no role"
    variant (user is mentioned or CC'd).
    """

    value: str = ""

    NONE: ClassVar[TaskUserRole]
    ASSIGNEE: ClassVar[TaskUserRole]
    CLIENT: ClassVar[TaskUserRole]

    @classmethod
    def parse(cls, raw: Optional[str]) -> TaskUserRole:
        """Total mapping: None and "" give NONE, never an error."""
        return cls(raw or "")

    @classmethod
    def custom(cls, role: str) -> TaskUserRole:
        return cls(role)

    @property
    def is_none(self) -> bool:
        return not self.value

    @property
    def is_custom(self) -> bool:
        return bool(self.value) and self.value not in _KNOWN_ROLES

    def to_tag_value(self) -> Optional[str]:
        """The role string for a `p` tag, or None for a bare reference."""
        return self.value or None

    def __str__(self) -> str:
        return self.value


TaskUserRole.NONE = TaskUserRole("")
TaskUserRole.ASSIGNEE = TaskUserRole("assignee")
TaskUserRole.CLIENT = TaskUserRole("client")

_KNOWN_ROLES: Final[frozenset[str]] = frozenset({"assignee", "client"})


# ---------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------

@dataclass(slots=True)
class TaskMetadata:
    """
    Tag-level metadata of a task or task-like object.

    Absent fields stay None / empty; `archived` is only ever True or
    None after decoding because the wire format carries presence only.
    Mutators return self so calls can be chained.
    """

    title: Optional[str] = None
    image: Optional[Url] = None
    published_at: Optional[Timestamp] = None
    due_at: Optional[Timestamp] = None
    archived: Optional[bool] = None
    tags: list[str] = field(default_factory=list)
    users: list[tuple[PublicKey, TaskUserRole]] = field(default_factory=list)

    def set_title(self, title: str) -> TaskMetadata:
        self.title = title
        return self

    def set_image(self, image: Url) -> TaskMetadata:
        self.image = image
        return self

    def set_published_at(self, timestamp: Timestamp) -> TaskMetadata:
        self.published_at = timestamp
        return self

    def set_due_at(self, timestamp: Timestamp) -> TaskMetadata:
        self.due_at = timestamp
        return self

    def set_archived(self, archived: bool = True) -> TaskMetadata:
        self.archived = archived
        return self

    def add_tag(self, tag: str) -> TaskMetadata:
        self.tags.append(tag)
        return self

    def add_tags(self, tags: Iterable[str]) -> TaskMetadata:
        self.tags.extend(tags)
        return self

    def add_user(self, pubkey: PublicKey, role: TaskUserRole = TaskUserRole.NONE) -> TaskMetadata:
        self.users.append((pubkey, role))
        return self


@dataclass(slots=True)
class Task:
    """
    A task / to-do item / reminder.

    Notes:
    - id is the stable `d` identifier and must be non-empty to encode.
    - description is the event content (markdown).
    """

    id: str
    description: str
    metadata: TaskMetadata = field(default_factory=TaskMetadata)

    def validate(self) -> None:
        if not self.id:
            raise MissingIdentifier("Task id must be a non-empty string")

    # -----------------------------------------------------------------
    # Chainable shortcuts onto metadata
    # -----------------------------------------------------------------

    def set_title(self, title: str) -> Task:
        self.metadata.set_title(title)
        return self

    def set_image(self, image: Url) -> Task:
        self.metadata.set_image(image)
        return self

    def set_published_at(self, timestamp: Timestamp) -> Task:
        self.metadata.set_published_at(timestamp)
        return self

    def set_due_at(self, timestamp: Timestamp) -> Task:
        self.metadata.set_due_at(timestamp)
        return self

    def set_archived(self, archived: bool = True) -> Task:
        self.metadata.set_archived(archived)
        return self

    def add_tag(self, tag: str) -> Task:
        self.metadata.add_tag(tag)
        return self

    def add_tags(self, tags: Iterable[str]) -> Task:
        self.metadata.add_tags(tags)
        return self

    def add_user(self, pubkey: PublicKey, role: TaskUserRole = TaskUserRole.NONE) -> Task:
        self.metadata.add_user(pubkey, role)
        return self


# ---------------------------------------------------------------------
# Color
# ---------------------------------------------------------------------

PRESET_COLORS: Final[tuple[str, ...]] = (
    "red",
    "orange",
    "yellow",
    "green",
    "cyan",
    "blue",
    "purple",
    "gray",
)


@dataclass(frozen=True, slots=True, order=True)
class Color:
    """
    Kanban column colour: one of PRESET_COLORS or a '#'-prefixed hex
    string. Hex strings are kept exactly as given.
    """

    value: str

    RED: ClassVar[Color]
    ORANGE: ClassVar[Color]
    YELLOW: ClassVar[Color]
    GREEN: ClassVar[Color]
    CYAN: ClassVar[Color]
    BLUE: ClassVar[Color]
    PURPLE: ClassVar[Color]
    GRAY: ClassVar[Color]

    def __post_init__(self) -> None:
        if self.value not in PRESET_COLORS and not self.value.startswith("#"):
            raise ValueError(f"not a preset or hex colour: {self.value!r}")

    @classmethod
    def parse(cls, raw: str) -> Optional[Color]:
        """
        Case-insensitive preset match, else hex if '#'-prefixed,
        else None.
        """
        lowered = raw.lower()
        if lowered in PRESET_COLORS:
            return cls(lowered)
        if raw.startswith("#"):
            return cls(raw)
        return None

    @classmethod
    def from_hex(cls, value: str) -> Color:
        if not value.startswith("#"):
            raise ValueError(f"hex colour must start with '#': {value!r}")
        return cls(value)

    @property
    def is_hex(self) -> bool:
        return self.value.startswith("#")

    def __str__(self) -> str:
        return self.value


Color.RED = Color("red")
Color.ORANGE = Color("orange")
Color.YELLOW = Color("yellow")
Color.GREEN = Color("green")
Color.CYAN = Color("cyan")
Color.BLUE = Color("blue")
Color.PURPLE = Color("purple")
Color.GRAY = Color("gray")


# ---------------------------------------------------------------------
# Kanban
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class KanbanColumnDefinition:
    """
    One column of a kanban board.

    `id` is machine-readable ("todo", "in-progress"), `label` is what
    users see ("To do", "In Progress").
    """

    id: str
    label: str
    color: Optional[Color] = None


@dataclass(slots=True)
class KanbanBoard:
    """
    A kanban board definition.

    When a board event names no maintainers, its author is the only
    maintainer.
    """

    id: str
    columns: list[KanbanColumnDefinition]
    maintainers: list[PublicKey]
    title: Optional[str] = None
    description: Optional[str] = None
    alt: Optional[str] = None

    def validate(self) -> None:
        if not self.id:
            raise MissingIdentifier("Kanban board id must be a non-empty string")
        if not self.columns:
            raise MissingColumns()


@dataclass(frozen=True, slots=True, order=True)
class KanbanTrackerStatus:
    """
    Where a tracked item sits on a board: a column id, or DEFER when
    the status is left to the tracked item itself.
    """

    column: str = ""

    DEFER: ClassVar[KanbanTrackerStatus]

    @classmethod
    def from_content(cls, content: str) -> KanbanTrackerStatus:
        return cls(content)

    @property
    def is_deferred(self) -> bool:
        return not self.column

    def to_content(self) -> str:
        return self.column


KanbanTrackerStatus.DEFER = KanbanTrackerStatus("")


@dataclass(slots=True)
class KanbanSpecificTrackerData:
    """Workflow-specific payload of a tracker on a kanban board."""

    status: KanbanTrackerStatus
    rank: Optional[int] = None
    task_metadata: TaskMetadata = field(default_factory=TaskMetadata)


# ---------------------------------------------------------------------
# Coordinate labels
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True, order=True)
class CoordinateLabel:
    """
    Semantic label attached to an `a` reference.

    "tracked_item" and "workflow" are recognised; any other string is
    kept as a custom label. The empty value means "no label".
    """

    value: str = ""

    NONE: ClassVar[CoordinateLabel]
    TRACKED_ITEM: ClassVar[CoordinateLabel]
    WORKFLOW: ClassVar[CoordinateLabel]

    @classmethod
    def parse(cls, raw: Optional[str]) -> CoordinateLabel:
        return cls(raw or "")

    @property
    def is_custom(self) -> bool:
        return bool(self.value) and self.value not in {"tracked_item", "workflow"}

    def __str__(self) -> str:
        return self.value


CoordinateLabel.NONE = CoordinateLabel("")
CoordinateLabel.TRACKED_ITEM = CoordinateLabel("tracked_item")
CoordinateLabel.WORKFLOW = CoordinateLabel("workflow")


@dataclass(frozen=True, slots=True)
class LabelledCoordinate:
    """A single reference tag read as (coordinate, label)."""

    coordinate: Coordinate
    label: CoordinateLabel = CoordinateLabel.NONE


# ---------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------

T = TypeVar("T")


@dataclass(frozen=True)
class Tracker(Generic[T]):
    """
    Binds a tracked item to a workflow.

    `workflow_specific_data` is whatever the workflow attaches to the
    item (for kanban: column, rank and task metadata).
    """

    id: str
    tracked_item: Coordinate
    workflow: Coordinate
    workflow_specific_data: T

    def validate(self) -> None:
        if not self.id:
            raise MissingIdentifier("Tracker id must be a non-empty string")


KanbanTracker = Tracker[KanbanSpecificTrackerData]
