"""Configuration constants for note-tree."""

from pathlib import Path

# Root sentinel: parent id of top-level nodes. Never a stored node.
ROOT_ID: str = "root"

# Priority of the first node under a parent with no children.
DEFAULT_PRIORITY: float = 1_000_000

# Gap left after the last sibling when appending.
PRIORITY_INCREMENT: float = 10_000

# Siblings closer than this are due for a rebalance.
REBALANCE_MIN_GAP: float = 1e-6

# Distance in pixels from a node's top/bottom edge that counts as "between".
GAP_THRESHOLD: float = 8

# Logical key the node collection is persisted under.
STORAGE_KEY: str = "node-storage"

# Directory with data. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/note-tree").expanduser(),
    Path("~/.note-tree").expanduser(),
    Path("~/.config/note-tree").expanduser(),
]

DATABASE_FILENAME: str = "notes.db"


def resolve_data_directory() -> Path:
    """Return the first existing data directory, or the first candidate."""
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
