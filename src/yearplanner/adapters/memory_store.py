"""In-memory storage adapter."""

import copy


class MemoryStore:
    """
    Process-local storage.

    Implements ItemStore protocol. Items are kept per instance, keyed by
    (user_id, data_type), and copied on the way in and out so callers can't
    mutate stored state.
    """

    def __init__(self):
        self._items: dict[tuple[str, str], list] = {}

    def load(self, user_id: str, data_type: str) -> list:
        return copy.deepcopy(self._items.get((user_id, data_type), []))

    def save(self, user_id: str, data_type: str, items: list) -> bool:
        self._items[(user_id, data_type)] = copy.deepcopy(items)
        return True

    def list(self, user_id: str) -> set[str]:
        return {data_type for (owner, data_type) in self._items if owner == user_id}

    def clear(self) -> None:
        self._items.clear()
