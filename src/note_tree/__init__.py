"""Ordered note tree: outline nodes, sibling priorities, drag and keyboard editing."""

from note_tree.core.drag.controller import DragController
from note_tree.core.keyboard.commands import Key, KeyboardCommandProcessor
from note_tree.core.storage.blob_store import MemoryBlobStore, SqliteBlobStore
from note_tree.core.storage.repository import NodeRepository
from note_tree.models.node import Node, NodeType
from note_tree.protocols import BlobStoreProtocol

__all__ = [
    "BlobStoreProtocol",
    "DragController",
    "Key",
    "KeyboardCommandProcessor",
    "MemoryBlobStore",
    "Node",
    "NodeRepository",
    "NodeType",
    "SqliteBlobStore",
]
