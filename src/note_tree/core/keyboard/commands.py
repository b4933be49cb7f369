"""Keyboard commands: map key presses on a focused node to tree edits."""

from dataclasses import dataclass
from enum import Enum

from loguru import logger

from note_tree.config import ROOT_ID
from note_tree.core.ordering.engine import (
    AfterSibling,
    FirstChild,
    LastChild,
    move_node,
    priority_for,
)
from note_tree.core.storage.repository import NodeRepository
from note_tree.core.tree.navigation import (
    children_of,
    find_node,
    has_children,
    visible_sequence,
)
from note_tree.models.node import Node, create_node


class Key(str, Enum):
    ENTER = "Enter"
    BACKSPACE = "Backspace"
    TAB = "Tab"
    ARROW_UP = "ArrowUp"
    ARROW_DOWN = "ArrowDown"


@dataclass(frozen=True)
class KeyResult:
    """Outcome of a key press.

    Attributes:
        handled: The key was consumed. False means it should fall through to
            default text editing.
        focus: Id of the node that should have focus afterwards, or None.
    """

    handled: bool
    focus: str | None


class KeyboardCommandProcessor:
    """Stateless dispatcher from (key, focused node) to a single repository call.

    ``focused_id`` of None or the root sentinel is the virtual root focus of
    an empty editor; only Enter does anything there.
    """

    def __init__(self, repo: NodeRepository) -> None:
        self.repo = repo

    def handle(self, key: Key | str, focused_id: str | None, *, shift: bool = False) -> KeyResult:
        """Process one key press."""
        try:
            key = Key(key)
        except ValueError:
            return KeyResult(handled=False, focus=focused_id)

        if focused_id is None or focused_id == ROOT_ID:
            if key is Key.ENTER:
                return self._enter_at_root()
            return KeyResult(handled=False, focus=focused_id)

        node = self.repo.get(focused_id)
        if node is None:
            logger.debug("Ignoring {} on missing node {}", key.value, focused_id)
            return KeyResult(handled=False, focus=focused_id)

        if key is Key.ENTER:
            return self._enter(node)
        if key is Key.BACKSPACE:
            return self._backspace(node)
        if key is Key.TAB:
            return self._outdent(node) if shift else self._indent(node)
        return self._arrow(node, up=key is Key.ARROW_UP)

    def _enter_at_root(self) -> KeyResult:
        siblings = children_of(self.repo.all(), ROOT_ID)
        new_node = create_node(ROOT_ID, priority_for(siblings, FirstChild()))
        self.repo.add(new_node)
        return KeyResult(handled=True, focus=new_node.id)

    def _enter(self, node: Node) -> KeyResult:
        siblings = children_of(self.repo.all(), node.parent_id)
        index = next(i for i, s in enumerate(siblings) if s.id == node.id)
        new_node = create_node(
            node.parent_id,
            priority_for(siblings, AfterSibling(index)),
            node_type=node.metadata.type,
        )
        self.repo.add(new_node)
        return KeyResult(handled=True, focus=new_node.id)

    def _backspace(self, node: Node) -> KeyResult:
        nodes = self.repo.all()
        if node.content or has_children(nodes, node.id):
            return KeyResult(handled=False, focus=node.id)

        visible = visible_sequence(nodes)
        index = visible.index(node.id) if node.id in visible else -1
        previous = visible[index - 1] if index > 0 else None
        self.repo.delete(node.id)
        return KeyResult(handled=True, focus=previous)

    def _indent(self, node: Node) -> KeyResult:
        """Make the node the last child of its previous sibling."""
        siblings = children_of(self.repo.all(), node.parent_id)
        index = next(i for i, s in enumerate(siblings) if s.id == node.id)
        if index > 0:
            move_node(self.repo, node.id, siblings[index - 1].id, LastChild())
        return KeyResult(handled=True, focus=node.id)

    def _outdent(self, node: Node) -> KeyResult:
        """Move the node to its grandparent, right after its former parent."""
        if node.parent_id == ROOT_ID:
            return KeyResult(handled=True, focus=node.id)
        nodes = self.repo.all()
        parent = find_node(nodes, node.parent_id)
        if parent is None:
            # Orphan: its parent was deleted.
            return KeyResult(handled=True, focus=node.id)

        parent_siblings = children_of(nodes, parent.parent_id)
        parent_index = next(i for i, s in enumerate(parent_siblings) if s.id == parent.id)
        move_node(self.repo, node.id, parent.parent_id, AfterSibling(parent_index))
        return KeyResult(handled=True, focus=node.id)

    def _arrow(self, node: Node, *, up: bool) -> KeyResult:
        visible = visible_sequence(self.repo.all())
        if node.id not in visible:
            return KeyResult(handled=True, focus=node.id)
        target = visible.index(node.id) + (-1 if up else 1)
        if 0 <= target < len(visible):
            return KeyResult(handled=True, focus=visible[target])
        return KeyResult(handled=True, focus=node.id)
