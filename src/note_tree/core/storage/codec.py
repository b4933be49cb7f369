"""Serialize the node collection to and from its persisted JSON form."""

import json
from collections.abc import Iterable
from typing import Any

from note_tree.models.node import Node, NodeMetadata, NodeState, NodeType


def node_to_record(node: Node) -> dict[str, Any]:
    """Convert a node into its persisted record shape."""
    return {
        "id": node.id,
        "content": node.content,
        "parentId": node.parent_id,
        "priority": node.priority,
        "metadata": {"type": node.metadata.type.value},
        "state": {
            "isExpanded": node.state.is_expanded,
            "isCompleted": node.state.is_completed,
        },
        "createdAt": node.created_at,
        "updatedAt": node.updated_at,
    }


def node_from_record(record: Any) -> Node:
    """Parse a persisted record into a Node.

    Missing ``state`` and ``metadata`` entries take their defaults.

    Raises:
        ValueError: The record is not an object, lacks ``id``, ``parentId`` or
            ``priority``, or holds a value of the wrong type.
    """
    if not isinstance(record, dict):
        msg = f"Expected a node record, got {type(record).__name__}"
        raise ValueError(msg)

    metadata = record.get("metadata") or {}
    state = record.get("state") or {}
    if not isinstance(metadata, dict) or not isinstance(state, dict):
        msg = f"Malformed metadata or state in node {record.get('id')!r}"
        raise ValueError(msg)
    raw_type = metadata.get("type", NodeType.TEXT.value)
    try:
        node_type = NodeType(raw_type)
    except ValueError:
        msg = f"Unknown node type {raw_type!r} in node {record.get('id')!r}"
        raise ValueError(msg) from None

    if not isinstance(record.get("id"), str) or not isinstance(record.get("parentId"), str):
        field = "parentId" if isinstance(record.get("id"), str) else "id"
        msg = f"Node record {record.get('id')!r} is missing a string {field!r}"
        raise ValueError(msg)

    try:
        return Node(
            id=record["id"],
            parent_id=record["parentId"],
            priority=float(record["priority"]),
            content=record.get("content"),
            metadata=NodeMetadata(type=node_type),
            state=NodeState(
                is_expanded=state.get("isExpanded", True) is not False,
                is_completed=bool(state.get("isCompleted", False)),
            ),
            created_at=int(record.get("createdAt", 0)),
            updated_at=int(record.get("updatedAt", 0)),
        )
    except KeyError as e:
        msg = f"Node record {record.get('id')!r} is missing {e.args[0]!r}"
        raise ValueError(msg) from e
    except (TypeError, ValueError) as e:
        msg = f"Malformed node record {record.get('id')!r}: {e}"
        raise ValueError(msg) from e


def dump_nodes(nodes: Iterable[Node]) -> str:
    """Serialize nodes as a JSON array, keeping collection order."""
    return json.dumps([node_to_record(n) for n in nodes], ensure_ascii=False)


def parse_nodes(raw: str) -> list[Node]:
    """Parse a serialized node collection.

    Raises:
        ValueError: The value is not a JSON array of records, or an id repeats.
    """
    data = json.loads(raw)
    if not isinstance(data, list):
        msg = f"Expected a list of node records, got {type(data).__name__}"
        raise ValueError(msg)

    nodes: list[Node] = []
    seen: set[str] = set()
    for record in data:
        node = node_from_record(record)
        if node.id in seen:
            msg = f"Duplicate node id in stored data: {node.id!r}"
            raise ValueError(msg)
        seen.add(node.id)
        nodes.append(node)
    return nodes
