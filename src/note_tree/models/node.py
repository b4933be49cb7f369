"""Domain models for the note tree."""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum


class NodeType(str, Enum):
    """Node variant. Informational only, does not affect tree shape."""

    TEXT = "text"
    TODO = "todo"


@dataclass(frozen=True)
class NodeMetadata:
    type: NodeType = NodeType.TEXT


@dataclass(frozen=True)
class NodeState:
    """Per-node UI state that survives reloads."""

    is_expanded: bool = True
    is_completed: bool = False


@dataclass(frozen=True)
class Node:
    """A single outline entry.

    Sibling order is the ascending sort of ``priority`` among nodes sharing
    ``parent_id``. Top-level nodes use the ``"root"`` sentinel as parent.
    """

    id: str
    parent_id: str
    priority: float
    content: str | None = ""
    metadata: NodeMetadata = field(default_factory=NodeMetadata)
    state: NodeState = field(default_factory=NodeState)
    created_at: int = 0
    updated_at: int = 0


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_node_id() -> str:
    return uuid.uuid4().hex


def create_node(
    parent_id: str,
    priority: float,
    *,
    content: str | None = "",
    node_type: NodeType = NodeType.TEXT,
    timestamp: int | None = None,
) -> Node:
    """Create a node with a fresh id and default state."""
    ts = now_ms() if timestamp is None else timestamp
    return Node(
        id=new_node_id(),
        parent_id=parent_id,
        priority=priority,
        content=content,
        metadata=NodeMetadata(type=node_type),
        state=NodeState(),
        created_at=ts,
        updated_at=ts,
    )
