"""Shared test fixtures."""

import pytest

from note_tree.core.storage.repository import NodeRepository
from tests.unit.fakes import FakeClock, RecordingBlobStore, make_node


@pytest.fixture
def store() -> RecordingBlobStore:
    return RecordingBlobStore()


@pytest.fixture
def repo(store: RecordingBlobStore) -> NodeRepository:
    """Return an empty repository backed by an in-memory store."""
    return NodeRepository(store, clock=FakeClock())


@pytest.fixture
def tree_repo(repo: NodeRepository) -> NodeRepository:
    """Return a repository holding a small outline.

    - a "Alpha"        (10)
        - a1 "Alpha one" (10)
        - a2 ""          (20)
    - b "Beta"         (20)
    - c ""             (30)
    """
    repo.add(make_node("a", 10, content="Alpha"))
    repo.add(make_node("a1", 10, parent_id="a", content="Alpha one"))
    repo.add(make_node("a2", 20, parent_id="a"))
    repo.add(make_node("b", 20, content="Beta"))
    repo.add(make_node("c", 30))
    return repo
