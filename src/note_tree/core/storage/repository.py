"""Node repository: the authoritative node collection and its persistence."""

import dataclasses
from collections.abc import Callable
from typing import Any

from loguru import logger

from note_tree.config import ROOT_ID, STORAGE_KEY
from note_tree.core.storage.codec import dump_nodes, parse_nodes
from note_tree.models.node import Node, now_ms
from note_tree.protocols import BlobStoreProtocol

# Fields that update() may change. id is immutable; timestamps are managed here.
_MUTABLE_FIELDS = frozenset(
    f.name for f in dataclasses.fields(Node) if f.name not in {"id", "created_at", "updated_at"}
)


class NodeRepository:
    """Own the node collection and write it through to a blob store.

    One repository is created per session and handed to the components that
    need it. Readers get immutable snapshots from all(); every mutation goes
    through add(), update() or delete() and is persisted before returning.

    Operations on a missing id are silent no-ops: UI state can race ahead of
    a node that was just deleted.
    """

    def __init__(
        self,
        store: BlobStoreProtocol,
        *,
        key: str = STORAGE_KEY,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.key = key
        self.clock = clock
        # Insertion-ordered; the order is the tie-break for equal priorities.
        self._nodes: dict[str, Node] = {}

    def load(self) -> int:
        """Seed the collection from the store. Returns the number of nodes read."""
        raw = self.store.load(self.key)
        if raw is None:
            logger.debug("Nothing stored under {}, starting empty", self.key)
            self._nodes = {}
            return 0
        nodes = parse_nodes(raw)
        self._nodes = {n.id: n for n in nodes}
        logger.info("Loaded {} nodes from {}", len(nodes), self.key)
        return len(nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def all(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    def get(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def add(self, node: Node) -> None:
        """Insert a new node.

        Raises:
            ValueError: A node with the same id exists, or the node is its own parent.
        """
        if node.id in self._nodes:
            msg = f"Node {node.id!r} already exists"
            raise ValueError(msg)
        if node.parent_id == node.id:
            msg = f"Node {node.id!r} cannot be its own parent"
            raise ValueError(msg)
        self._nodes[node.id] = node
        logger.debug("Added node {} under {}", node.id, node.parent_id)
        self._persist()

    def update(self, node_id: str, **changes: Any) -> Node | None:
        """Merge changes onto a node and bump its updated_at.

        Returns the updated node, or None when the id is unknown or the new
        parent_id is the node itself or one of its descendants.

        Raises:
            ValueError: changes names a field that cannot be updated.
        """
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            msg = f"Cannot update field(s): {sorted(unknown)!r}"
            raise ValueError(msg)

        node = self._nodes.get(node_id)
        if node is None:
            logger.debug("Ignoring update of missing node {}", node_id)
            return None
        new_parent_id = changes.get("parent_id", node.parent_id)
        if new_parent_id != node.parent_id and self._is_within(new_parent_id, node_id):
            logger.debug("Ignoring update moving {} under {}", node_id, new_parent_id)
            return None

        updated = dataclasses.replace(node, **changes, updated_at=self.clock())
        self._nodes[node_id] = updated
        self._persist()
        return updated

    def delete(self, node_id: str) -> bool:
        """Remove exactly one node. Children are left pointing at the removed id.

        Returns True when a node was removed.
        """
        if self._nodes.pop(node_id, None) is None:
            logger.debug("Ignoring delete of missing node {}", node_id)
            return False
        logger.debug("Deleted node {}", node_id)
        self._persist()
        return True

    def _is_within(self, node_id: str, ancestor_id: str) -> bool:
        """Walk up from node_id; True when the chain passes ancestor_id."""
        seen: set[str] = set()
        current: str | None = node_id
        while current is not None and current != ROOT_ID and current not in seen:
            if current == ancestor_id:
                return True
            seen.add(current)
            parent = self._nodes.get(current)
            current = parent.parent_id if parent is not None else None
        return False

    def _persist(self) -> None:
        self.store.save(self.key, dump_nodes(self._nodes.values()))
