"""Tree navigation: children, visibility, breadcrumbs, subtree counts.

All functions are pure and take the full node collection. Each call scans the
collection, which is fine at note-taking scale; callers only go through these
functions so a parent->children index can replace the scans later.
"""

from collections.abc import Sequence

from note_tree.config import ROOT_ID
from note_tree.models.node import Node


def find_node(nodes: Sequence[Node], node_id: str) -> Node | None:
    """Return the node with the given id, or None."""
    return next((n for n in nodes if n.id == node_id), None)


def children_of(nodes: Sequence[Node], parent_id: str) -> tuple[Node, ...]:
    """Get direct children of a node, ordered by priority.

    The sort is stable, so equal priorities keep collection order.
    """
    siblings = (n for n in nodes if n.parent_id == parent_id)
    return tuple(sorted(siblings, key=lambda n: n.priority))


def has_children(nodes: Sequence[Node], node_id: str) -> bool:
    return any(n.parent_id == node_id for n in nodes)


def visible_sequence(nodes: Sequence[Node]) -> tuple[str, ...]:
    """Flatten the tree into display order.

    Depth-first pre-order walk from the root sentinel. Children of a node are
    skipped when its ``is_expanded`` state is false; the node itself stays.
    """
    visible: list[str] = []
    seen: set[str] = set()

    def walk(parent_id: str) -> None:
        for node in children_of(nodes, parent_id):
            # Cycles cannot be created through the ordering engine, but the
            # persisted data is not trusted.
            if node.id in seen:
                continue
            seen.add(node.id)
            visible.append(node.id)
            if node.state.is_expanded is not False:
                walk(node.id)

    walk(ROOT_ID)
    return tuple(visible)


def count_subtree(nodes: Sequence[Node], node_id: str) -> int:
    """Count a node and all of its descendants.

    Returns 0 when the node does not exist.
    """
    if find_node(nodes, node_id) is None:
        return 0
    total = 0
    todo = [node_id]
    seen: set[str] = set()
    while todo:
        current = todo.pop()
        if current in seen:
            continue
        seen.add(current)
        total += 1
        todo.extend(n.id for n in nodes if n.parent_id == current)
    return total


def get_breadcrumbs(nodes: Sequence[Node], node_id: str) -> tuple[Node, ...]:
    """Get ancestors of a node.

    Returns ancestors in order from the top level to the immediate parent
    (excludes the node itself). The walk stops at the root sentinel, at a
    parent id that is not stored, or on a repeated id.
    """
    by_id = {n.id: n for n in nodes}
    node = by_id.get(node_id)
    if node is None:
        return ()

    ancestors: list[Node] = []
    seen = {node.id}
    parent_id = node.parent_id
    while parent_id != ROOT_ID and parent_id not in seen:
        parent = by_id.get(parent_id)
        if parent is None:
            break
        ancestors.append(parent)
        seen.add(parent_id)
        parent_id = parent.parent_id
    return tuple(reversed(ancestors))


def find_orphans(nodes: Sequence[Node]) -> tuple[Node, ...]:
    """Nodes whose parent is neither the root sentinel nor a stored node.

    Deleting a node does not cascade, so its children end up here.
    """
    ids = {n.id for n in nodes}
    return tuple(n for n in nodes if n.parent_id != ROOT_ID and n.parent_id not in ids)
