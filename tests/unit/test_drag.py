"""Tests for drag-and-drop classification and drops."""

import pytest

from note_tree.config import PRIORITY_INCREMENT, ROOT_ID
from note_tree.core.drag.controller import (
    Between,
    DragController,
    DragState,
    DropPosition,
    Inside,
    Rect,
    classify_drop_position,
)
from note_tree.core.storage.repository import NodeRepository
from note_tree.core.tree.navigation import children_of
from tests.unit.fakes import RecordingBlobStore

ROW = Rect(top=100, height=30)


@pytest.mark.parametrize(
    ("pointer_y", "expected"),
    [
        (96, DropPosition.TOP),
        (100, DropPosition.TOP),
        (108, DropPosition.TOP),
        (109, DropPosition.INSIDE),
        (115, DropPosition.INSIDE),
        (121, DropPosition.INSIDE),
        (122, DropPosition.BOTTOM),
        (130, DropPosition.BOTTOM),
    ],
)
def test_classify_drop_position(pointer_y: float, expected: DropPosition) -> None:
    assert classify_drop_position(ROW, pointer_y, threshold=8) is expected


def test_rect_bottom() -> None:
    assert ROW.bottom == 130


def test_start_unknown_node_stays_idle(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo)

    assert drag.start("ghost") is False
    assert drag.state is DragState.IDLE


def test_move_while_idle_does_nothing(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo)

    assert drag.move_over_node("a", ROW, 115) is None
    assert drag.drop() is False


def test_drop_before_target(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("c")

    target = drag.move_over_node("a", ROW, 102)

    assert target == Between(node_id="a", index=0)
    assert drag.drop() is True
    assert [n.id for n in children_of(tree_repo.all(), ROOT_ID)] == ["c", "a", "b"]
    assert tree_repo.get("c").priority == 5  # type: ignore[union-attr]


def test_drop_after_target(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("c")

    assert drag.move_over_node("a", ROW, 128) == Between(node_id="a", index=1)
    assert drag.drop() is True

    assert [n.id for n in children_of(tree_repo.all(), ROOT_ID)] == ["a", "c", "b"]
    assert tree_repo.get("c").priority == 15  # type: ignore[union-attr]


def test_drop_inside_target_nests_as_last_child(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("c")

    assert drag.move_over_node("a", ROW, 115) == Inside(node_id="a")
    assert drag.drop() is True

    moved = tree_repo.get("c")
    assert moved is not None
    assert moved.parent_id == "a"
    assert moved.priority == 20 + PRIORITY_INCREMENT


def test_drop_between_nested_siblings(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("c")

    assert drag.move_over_node("a2", ROW, 101) == Between(node_id="a2", index=1)
    drag.drop()

    assert [n.id for n in children_of(tree_repo.all(), "a")] == ["a1", "c", "a2"]


def test_target_is_recomputed_on_every_move(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("c")

    drag.move_over_node("a", ROW, 115)
    drag.move_over_node("b", ROW, 101)

    assert drag.drop_target == Between(node_id="b", index=1)


def test_hovering_own_subtree_clears_target(
    tree_repo: NodeRepository, store: RecordingBlobStore
) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("a")
    saves_before = len(store.saves)

    assert drag.move_over_node("b", ROW, 115) == Inside(node_id="b")
    assert drag.move_over_node("a1", ROW, 115) is None
    assert drag.move_over_node("a", ROW, 101) is None
    assert drag.drop() is False
    assert len(store.saves) == saves_before
    assert tree_repo.get("a").parent_id == ROOT_ID  # type: ignore[union-attr]


def test_drop_below_all_root_nodes_appends_at_root(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("a1")

    target = drag.move_over_root(pointer_y=300, last_root_bottom=250)

    assert target == Between(node_id="c", index=3)
    assert drag.drop() is True
    moved = tree_repo.get("a1")
    assert moved is not None
    assert moved.parent_id == ROOT_ID
    assert moved.priority == 30 + PRIORITY_INCREMENT


def test_root_container_near_last_node_keeps_target(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("a1")

    assert drag.move_over_root(pointer_y=255, last_root_bottom=250) is None


def test_leave_clears_target_and_drop_is_noop(
    tree_repo: NodeRepository, store: RecordingBlobStore
) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("c")
    drag.move_over_node("a", ROW, 115)
    saves_before = len(store.saves)

    drag.leave()

    assert drag.drop_target is None
    assert drag.drop() is False
    assert len(store.saves) == saves_before
    assert drag.state is DragState.IDLE


def test_cancel_resets_without_mutation(
    tree_repo: NodeRepository, store: RecordingBlobStore
) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("c")
    drag.move_over_node("a", ROW, 115)
    saves_before = len(store.saves)

    drag.cancel()

    assert drag.state is DragState.IDLE
    assert drag.source_id is None
    assert drag.drop_target is None
    assert len(store.saves) == saves_before


def test_drop_resets_state(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo, threshold=8)
    drag.start("c")
    drag.move_over_node("a", ROW, 115)

    drag.drop()

    assert drag.state is DragState.IDLE
    assert drag.source_id is None
    assert drag.drop_target is None


def test_preview_count_includes_descendants(tree_repo: NodeRepository) -> None:
    drag = DragController(tree_repo)
    assert drag.preview_count() == 0

    drag.start("a")

    assert drag.preview_count() == 3
