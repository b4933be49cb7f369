"""Single-node edits: content, expansion, completion, and adding children."""

import dataclasses

from note_tree.config import ROOT_ID
from note_tree.core.ordering.engine import LastChild, priority_for
from note_tree.core.storage.repository import NodeRepository
from note_tree.core.tree.navigation import children_of
from note_tree.models.node import Node, NodeType, create_node


def set_content(repo: NodeRepository, node_id: str, content: str | None) -> Node | None:
    return repo.update(node_id, content=content)


def toggle_expanded(repo: NodeRepository, node_id: str) -> Node | None:
    """Flip a node's expansion state. No-op for unknown ids."""
    node = repo.get(node_id)
    if node is None:
        return None
    state = dataclasses.replace(node.state, is_expanded=not node.state.is_expanded)
    return repo.update(node_id, state=state)


def set_completed(repo: NodeRepository, node_id: str, completed: bool) -> Node | None:
    node = repo.get(node_id)
    if node is None:
        return None
    return repo.update(node_id, state=dataclasses.replace(node.state, is_completed=completed))


def add_child(
    repo: NodeRepository,
    parent_id: str,
    *,
    content: str | None = "",
    node_type: NodeType = NodeType.TEXT,
) -> Node | None:
    """Append a new node as the last child of parent_id.

    Returns the new node, or None when the parent does not exist.
    """
    if parent_id != ROOT_ID and parent_id not in repo:
        return None
    siblings = children_of(repo.all(), parent_id)
    node = create_node(
        parent_id, priority_for(siblings, LastChild()), content=content, node_type=node_type
    )
    repo.add(node)
    return node
