"""Drag-and-drop: classify pointer positions into drop targets and apply the drop.

The controller is a small state machine (idle -> dragging -> idle) driven by
pointer events from whatever toolkit renders the tree. It only needs node
bounds and pointer coordinates; classify_drop_position() is pure.
"""

from dataclasses import dataclass
from enum import Enum

from loguru import logger

from note_tree.config import GAP_THRESHOLD, ROOT_ID
from note_tree.core.ordering.engine import (
    BeforeSibling,
    LastChild,
    PositionHint,
    is_descendant,
    move_node,
)
from note_tree.core.storage.repository import NodeRepository
from note_tree.core.tree.navigation import children_of, count_subtree, find_node


@dataclass(frozen=True)
class Rect:
    """Vertical bounds of a rendered node."""

    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


class DropPosition(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    INSIDE = "inside"


@dataclass(frozen=True)
class Between:
    """Insert into the gap at ``index`` among ``node_id``'s siblings."""

    node_id: str
    index: int


@dataclass(frozen=True)
class Inside:
    """Nest as the last child of ``node_id``."""

    node_id: str


DropTarget = Between | Inside


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


def classify_drop_position(rect: Rect, pointer_y: float, threshold: float) -> DropPosition:
    """Classify a pointer's vertical position against a node's bounds.

    Within ``threshold`` of the top edge is TOP, within ``threshold`` of the
    bottom edge is BOTTOM, anything in between is INSIDE.
    """
    relative_y = pointer_y - rect.top
    if relative_y <= threshold:
        return DropPosition.TOP
    if relative_y >= rect.height - threshold:
        return DropPosition.BOTTOM
    return DropPosition.INSIDE


class DragController:
    """Track one drag gesture and turn its final target into a single move.

    Gesture state is transient: nothing is persisted until drop().
    """

    def __init__(self, repo: NodeRepository, *, threshold: float = GAP_THRESHOLD) -> None:
        self.repo = repo
        self.threshold = threshold
        self.state = DragState.IDLE
        self.source_id: str | None = None
        self.drop_target: DropTarget | None = None

    def start(self, source_id: str) -> bool:
        """Begin dragging a node. Returns False for unknown nodes."""
        if self.repo.get(source_id) is None:
            logger.debug("Ignoring drag of missing node {}", source_id)
            return False
        self.state = DragState.DRAGGING
        self.source_id = source_id
        self.drop_target = None
        return True

    def preview_count(self) -> int:
        """Number of nodes travelling with the dragged node (itself included)."""
        if self.source_id is None:
            return 0
        return count_subtree(self.repo.all(), self.source_id)

    def move_over_node(self, target_id: str, rect: Rect, pointer_y: float) -> DropTarget | None:
        """Recompute the drop target for a pointer over a rendered node.

        Targets that are the dragged node or inside its subtree clear the
        drop target.
        """
        if self.state is not DragState.DRAGGING or self.source_id is None:
            return None

        nodes = self.repo.all()
        target = find_node(nodes, target_id)
        if (
            target is None
            or target_id == self.source_id
            or is_descendant(nodes, self.source_id, target_id)
        ):
            self.drop_target = None
            return None

        position = classify_drop_position(rect, pointer_y, self.threshold)
        if position is DropPosition.INSIDE:
            self.drop_target = Inside(node_id=target.id)
        else:
            siblings = children_of(nodes, target.parent_id)
            index = next(i for i, s in enumerate(siblings) if s.id == target.id)
            if position is DropPosition.BOTTOM:
                index += 1
            self.drop_target = Between(node_id=target.id, index=index)
        return self.drop_target

    def move_over_root(self, pointer_y: float, last_root_bottom: float) -> DropTarget | None:
        """Handle a pointer over the root container outside any node.

        Below the last top-level node (by more than the threshold) the target
        becomes "after the last top-level node". Elsewhere the current target
        is kept.
        """
        if self.state is not DragState.DRAGGING:
            return None
        if pointer_y <= last_root_bottom + self.threshold:
            return self.drop_target

        roots = children_of(self.repo.all(), ROOT_ID)
        if roots:
            self.drop_target = Between(node_id=roots[-1].id, index=len(roots))
        return self.drop_target

    def leave(self) -> None:
        """The pointer left the interactive region."""
        self.drop_target = None

    def cancel(self) -> None:
        """Abort the gesture without mutating anything."""
        if self.state is DragState.DRAGGING:
            logger.debug("Drag of {} cancelled", self.source_id)
        self._reset()

    def drop(self) -> bool:
        """Finish the gesture. Returns True when a node was moved."""
        source_id, target = self.source_id, self.drop_target
        self._reset()
        if source_id is None or target is None:
            return False

        nodes = self.repo.all()
        if target.node_id == source_id or is_descendant(nodes, source_id, target.node_id):
            logger.debug("Discarding drop of {} onto its own subtree", source_id)
            return False

        hint: PositionHint
        if isinstance(target, Inside):
            new_parent_id = target.node_id
            hint = LastChild()
        else:
            anchor = find_node(nodes, target.node_id)
            if anchor is None:
                return False
            new_parent_id = anchor.parent_id
            hint = BeforeSibling(target.index)

        return move_node(self.repo, source_id, new_parent_id, hint) is not None

    def _reset(self) -> None:
        self.state = DragState.IDLE
        self.source_id = None
        self.drop_target = None
