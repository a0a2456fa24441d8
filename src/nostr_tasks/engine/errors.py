# src/nostr_tasks/engine/errors.py

"""
Codec exception hierarchy.

All decode/encode failures derive from CodecError. Primitive parsers
raise plain ValueError; the codecs translate those into the classes
below where a failure is fatal, and skip silently where it is not.
"""

from __future__ import annotations

from typing import Optional


class CodecError(Exception):
    """Base class for every tag codec failure."""


# ---------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------

class WrongKind(CodecError):
    """Event kind does not match the decoder."""

    def __init__(self, kind: int, expected: Optional[int] = None):
        self.kind = kind
        self.expected = expected
        if expected is None:
            super().__init__(f"Wrong kind: {kind}")
        else:
            super().__init__(f"wrong event kind. Expected: {expected}; Got: {kind}")


class MissingIdentifier(CodecError):
    """No usable `d` tag (decode) or an empty id (encode)."""

    def __init__(self, message: str = "Missing identifier"):
        super().__init__(message)


class InvalidUrl(CodecError):
    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid URL: {raw}")


class InvalidTimestamp(CodecError):
    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid timestamp: {raw}")


# ---------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------

class InvalidATag(CodecError):
    """A tag could not be read as a labelled coordinate reference."""

    def __init__(self, message: str = "invalid a-tag"):
        super().__init__(message)


class MissingTrackedItem(CodecError):
    def __init__(self) -> None:
        super().__init__("missing tracked item reference")


class MissingWorkflow(CodecError):
    def __init__(self) -> None:
        super().__init__("missing workflow reference")


class CannotGetWorkflowSpecificData(CodecError):
    """
    The workflow-specific payload could not be decoded.

    The payload decoder's own exception is chained as `__cause__`.
    """

    def __init__(self) -> None:
        super().__init__("cannot get workflow specific data")


# ---------------------------------------------------------------------
# Kanban
# ---------------------------------------------------------------------

class NotAKanbanBoard(WrongKind):
    def __init__(self, kind: int, expected: int):
        super().__init__(kind, expected)
        self.args = (f"Event is not a kanban board (kind {expected})",)


class KanbanError(CodecError):
    """Malformed kanban board or column."""

    message = "invalid kanban board"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class NotAColumnTag(KanbanError):
    message = "not a column tag"


class MissingColumnContent(KanbanError):
    message = "missing tag content"


class MissingColumnLabel(KanbanError):
    message = "No label"


class MissingColumns(KanbanError):
    message = "Kanban board must have at least one column"
