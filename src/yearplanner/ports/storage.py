"""Storage backend interface."""

from typing import Protocol


class ItemStore(Protocol):
    """Interface for per-user JSON item storage.

    Every operation is a wholesale read or write of one data type ("events",
    "tasks") for one user. Backend errors never escape: loads fall back to an
    empty list and saves report False.
    """

    def load(self, user_id: str, data_type: str) -> list:
        """Load stored items. Returns [] if nothing is stored or on failure."""
        ...

    def save(self, user_id: str, data_type: str, items: list) -> bool:
        """Overwrite stored items. Returns False on failure."""
        ...

    def list(self, user_id: str) -> set[str]:
        """Data types stored for a user."""
        ...

    def clear(self) -> None:
        """Remove everything from the store."""
        ...
