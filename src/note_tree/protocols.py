"""Protocols for dependency injection in the note tree."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BlobStoreProtocol(Protocol):
    """Protocol for key-value stores holding the serialized node collection."""

    def load(self, key: str) -> str | None:
        """Return the value stored under key, or None if nothing is stored."""
        ...

    def save(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...
