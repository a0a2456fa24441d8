"""Tests for colours, kanban columns, kanban boards and kanban tracker payloads."""

import pytest

from nostr_tasks.engine.errors import (
    InvalidUrl,
    KanbanError,
    MissingColumnContent,
    MissingColumnLabel,
    MissingColumns,
    MissingIdentifier,
    NotAColumnTag,
    NotAKanbanBoard,
    WrongKind,
)
from nostr_tasks.engine.event import KIND_KANBAN_BOARD, KIND_TASK, KIND_TRACKER, Tag
from nostr_tasks.engine.model import (
    Color,
    KanbanBoard,
    KanbanColumnDefinition,
    KanbanSpecificTrackerData,
    KanbanTrackerStatus,
    TaskMetadata,
    TaskUserRole,
)
from nostr_tasks.engine.parse import (
    parse_kanban_board,
    parse_kanban_column,
    parse_kanban_tracker_data,
)
from nostr_tasks.engine.primitives import PublicKey
from nostr_tasks.engine.render import (
    kanban_board_to_event_builder,
    kanban_column_to_tag,
    kanban_tracker_data_to_content_and_tags,
)

PK1 = "b3e392b11f5d4f28321cedd09303a748acfd0487aea5a7450b3481c60b6e4f87"
PK2 = "32e1827635450ebb3c5a7d12c1f8e7b2b514439ac10a67eef3d9fd9c5c68e245"


# ---------------------------------------------------------------------------
# Color
# ---------------------------------------------------------------------------

class TestColor:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("red", Color.RED),
            ("Orange", Color.ORANGE),
            ("YELLOW", Color.YELLOW),
            ("green", Color.GREEN),
            ("cyan", Color.CYAN),
            ("blue", Color.BLUE),
            ("purple", Color.PURPLE),
            ("gray", Color.GRAY),
        ],
    )
    def test_presets_case_insensitive(self, raw, expected):
        assert Color.parse(raw) == expected

    def test_hex_kept_verbatim(self):
        color = Color.parse("#FF00aa")
        assert color == Color.from_hex("#FF00aa")
        assert color.is_hex
        assert str(color) == "#FF00aa"

    @pytest.mark.parametrize("raw", ["magenta", "", "grey", "FF0000"])
    def test_unknown_is_none(self, raw):
        assert Color.parse(raw) is None

    def test_preset_str(self):
        assert str(Color.PURPLE) == "purple"
        assert not Color.PURPLE.is_hex

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            Color("magenta")
        with pytest.raises(ValueError):
            Color.from_hex("red")

    def test_round_trip(self):
        for color in (Color.RED, Color.GRAY, Color.from_hex("#abc")):
            assert Color.parse(str(color)) == color


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------

class TestKanbanColumn:
    def test_decode(self):
        column = parse_kanban_column(Tag.parse(["col", "todo", "To do", "red"]))
        assert column == KanbanColumnDefinition("todo", "To do", Color.RED)

    def test_decode_without_color(self):
        column = parse_kanban_column(Tag.parse(["col", "todo", "To do"]))
        assert column.color is None

    def test_decode_unknown_color_is_none(self):
        column = parse_kanban_column(Tag.parse(["col", "todo", "To do", "magenta"]))
        assert column.color is None

    def test_not_a_column(self):
        with pytest.raises(NotAColumnTag):
            parse_kanban_column(Tag.parse(["t", "todo", "To do"]))

    def test_missing_content(self):
        with pytest.raises(MissingColumnContent) as exc_info:
            parse_kanban_column(Tag.parse(["col"]))
        assert str(exc_info.value) == "missing tag content"

    def test_missing_label(self):
        with pytest.raises(MissingColumnLabel) as exc_info:
            parse_kanban_column(Tag.parse(["col", "todo"]))
        assert str(exc_info.value) == "No label"

    def test_empty_label_is_kept(self):
        assert parse_kanban_column(Tag.parse(["col", "todo", ""])).label == ""

    def test_encode(self):
        assert kanban_column_to_tag(KanbanColumnDefinition("doing", "Doing")).as_list() == [
            "col",
            "doing",
            "Doing",
        ]
        assert kanban_column_to_tag(
            KanbanColumnDefinition("done", "Done", Color.from_hex("#00FF00"))
        ).as_list() == ["col", "done", "Done", "#00FF00"]


# ---------------------------------------------------------------------------
# Boards
# ---------------------------------------------------------------------------

class TestKanbanBoardDecode:
    def test_full_board(self, make_event):
        event = make_event(
            KIND_KANBAN_BOARD,
            "",
            [
                ["d", "board-1"],
                ["title", "Roadmap"],
                ["description", "Q3 work"],
                ["alt", "A kanban board"],
                ["col", "todo", "To do", "gray"],
                ["col", "doing", "Doing", "#123456"],
                ["col", "done", "Done"],
                ["p", PK1],
                ["p", PK2],
            ],
        )
        board = parse_kanban_board(event)
        assert board.id == "board-1"
        assert board.title == "Roadmap"
        assert board.description == "Q3 work"
        assert board.alt == "A kanban board"
        assert board.columns == [
            KanbanColumnDefinition("todo", "To do", Color.GRAY),
            KanbanColumnDefinition("doing", "Doing", Color.from_hex("#123456")),
            KanbanColumnDefinition("done", "Done"),
        ]
        assert board.maintainers == [PublicKey.parse(PK1), PublicKey.parse(PK2)]

    def test_optional_fields_absent(self, make_event):
        event = make_event(KIND_KANBAN_BOARD, "", [["d", "b"], ["col", "todo", "To do"]])
        board = parse_kanban_board(event)
        assert board.title is None
        assert board.description is None
        assert board.alt is None

    def test_first_title_wins(self, make_event):
        event = make_event(
            KIND_KANBAN_BOARD,
            "",
            [["d", "b"], ["title", "one"], ["title", "two"], ["col", "todo", "To do"]],
        )
        assert parse_kanban_board(event).title == "one"

    def test_wrong_kind(self, make_event):
        event = make_event(KIND_TASK, "", [["d", "b"], ["col", "todo", "To do"]])
        with pytest.raises(NotAKanbanBoard) as exc_info:
            parse_kanban_board(event)
        assert isinstance(exc_info.value, WrongKind)
        assert str(exc_info.value) == "Event is not a kanban board (kind 35002)"

    def test_missing_identifier(self, make_event):
        event = make_event(KIND_KANBAN_BOARD, "", [["col", "todo", "To do"]])
        with pytest.raises(MissingIdentifier):
            parse_kanban_board(event)

    @pytest.mark.parametrize(
        "extra",
        [
            [],
            [["title", "T"], ["p", PK1]],
            [["column", "todo", "To do"], ["a", f"35001:{PK1}:x"]],
        ],
    )
    def test_requires_a_column(self, make_event, extra):
        event = make_event(KIND_KANBAN_BOARD, "", [["d", "b"]] + extra)
        with pytest.raises(MissingColumns) as exc_info:
            parse_kanban_board(event)
        assert "must have at least one column" in str(exc_info.value)

    def test_one_bad_column_fails_board(self, make_event):
        event = make_event(
            KIND_KANBAN_BOARD,
            "",
            [["d", "b"], ["col", "todo", "To do"], ["col", "doing"]],
        )
        with pytest.raises(KanbanError):
            parse_kanban_board(event)

    def test_author_is_default_maintainer(self, make_event, author):
        event = make_event(KIND_KANBAN_BOARD, "", [["d", "b"], ["col", "todo", "To do"]])
        assert parse_kanban_board(event).maintainers == [author]

    def test_invalid_maintainers_fall_back_to_author(self, make_event, author):
        event = make_event(
            KIND_KANBAN_BOARD,
            "",
            [["d", "b"], ["col", "todo", "To do"], ["p", "garbage"], ["p"]],
        )
        assert parse_kanban_board(event).maintainers == [author]

    def test_author_not_added_to_explicit_maintainers(self, make_event, author):
        event = make_event(
            KIND_KANBAN_BOARD,
            "",
            [["d", "b"], ["col", "todo", "To do"], ["p", "garbage"], ["p", PK1]],
        )
        maintainers = parse_kanban_board(event).maintainers
        assert maintainers == [PublicKey.parse(PK1)]
        assert author not in maintainers


class TestKanbanBoardEncode:
    def _board(self, **kwargs):
        base = dict(
            id="board-1",
            columns=[
                KanbanColumnDefinition("todo", "To do", Color.RED),
                KanbanColumnDefinition("done", "Done"),
            ],
            maintainers=[PublicKey.parse(PK1)],
        )
        base.update(kwargs)
        return KanbanBoard(**base)

    def test_tags(self):
        board = self._board(title="Roadmap", alt="summary")
        builder = kanban_board_to_event_builder(board)
        assert builder.kind == KIND_KANBAN_BOARD
        assert builder.content == ""
        assert [t.as_list() for t in builder.tags] == [
            ["d", "board-1"],
            ["title", "Roadmap"],
            ["alt", "summary"],
            ["col", "todo", "To do", "red"],
            ["col", "done", "Done"],
            ["p", PK1],
        ]

    def test_round_trip(self, make_event):
        board = self._board(
            title="Roadmap",
            description="Q3",
            alt="summary",
            maintainers=[PublicKey.parse(PK1), PublicKey.parse(PK2)],
        )
        builder = kanban_board_to_event_builder(board)
        event = make_event(builder.kind, builder.content, [t.as_list() for t in builder.tags])
        assert parse_kanban_board(event) == board

    def test_rejects_empty_id(self):
        with pytest.raises(MissingIdentifier):
            kanban_board_to_event_builder(self._board(id=""))

    def test_rejects_no_columns(self):
        with pytest.raises(MissingColumns):
            kanban_board_to_event_builder(self._board(columns=[]))


# ---------------------------------------------------------------------------
# Kanban tracker payload
# ---------------------------------------------------------------------------

class TestKanbanTrackerData:
    def test_column_status(self, make_event):
        data = parse_kanban_tracker_data(make_event(KIND_TRACKER, "doing"))
        assert data.status == KanbanTrackerStatus.from_content("doing")
        assert not data.status.is_deferred

    def test_empty_content_defers(self, make_event):
        data = parse_kanban_tracker_data(make_event(KIND_TRACKER, ""))
        assert data.status == KanbanTrackerStatus.DEFER
        assert data.status.is_deferred

    def test_rank(self, make_event):
        data = parse_kanban_tracker_data(
            make_event(KIND_TRACKER, "", [["rank", "3"], ["rank", "9"]])
        )
        assert data.rank == 3

    @pytest.mark.parametrize("raw", ["-1", "abc", "4294967296", ""])
    def test_invalid_rank_is_none(self, make_event, raw):
        data = parse_kanban_tracker_data(make_event(KIND_TRACKER, "", [["rank", raw]]))
        assert data.rank is None

    def test_task_metadata(self, make_event):
        data = parse_kanban_tracker_data(
            make_event(KIND_TRACKER, "todo", [["title", "Card"], ["p", PK1, "assignee"]])
        )
        assert data.task_metadata.title == "Card"
        assert data.task_metadata.users == [(PublicKey.parse(PK1), TaskUserRole.ASSIGNEE)]

    def test_task_metadata_errors_propagate(self, make_event):
        with pytest.raises(InvalidUrl):
            parse_kanban_tracker_data(make_event(KIND_TRACKER, "", [["image", "nope"]]))

    def test_encode(self):
        data = KanbanSpecificTrackerData(
            status=KanbanTrackerStatus.from_content("todo"),
            rank=2,
            task_metadata=TaskMetadata().set_title("Card"),
        )
        content, tags = kanban_tracker_data_to_content_and_tags(data)
        assert content == "todo"
        assert [t.as_list() for t in tags] == [["rank", "2"], ["title", "Card"]]

    def test_encode_deferred_without_rank(self):
        content, tags = kanban_tracker_data_to_content_and_tags(
            KanbanSpecificTrackerData(status=KanbanTrackerStatus.DEFER)
        )
        assert content == ""
        assert tags == []
