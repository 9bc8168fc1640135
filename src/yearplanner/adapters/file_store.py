"""File-based storage adapter."""

import json
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class FileStore:
    """
    Local-disk storage.

    Implements ItemStore protocol. Each user gets a directory under the data
    dir holding one pretty-printed `<type>.json` file per data type.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _user_dir(self, user_id: str) -> Path | None:
        """Directory for a user, or None if the id would leave the data dir."""
        root = self.data_dir.resolve()
        path = (root / user_id).resolve()
        if path.parent != root:
            logger.warning(f"Rejected user id {user_id!r}")
            return None
        return path

    def _path_for(self, user_id: str, data_type: str) -> Path | None:
        """Get the file path for a user's data type."""
        user_dir = self._user_dir(user_id)
        if user_dir is None:
            return None
        path = user_dir / f"{data_type}.json"
        if path.parent != user_dir:
            logger.warning(f"Rejected data type {data_type!r}")
            return None
        return path

    def load(self, user_id: str, data_type: str) -> list:
        """Load items. Returns [] if the file is missing, unreadable or not an array."""
        path = self._path_for(user_id, data_type)
        if path is None or not path.exists():
            return []
        try:
            items = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            return []
        if not isinstance(items, list):
            logger.warning(f"Ignoring {path}: expected a JSON array")
            return []
        return items

    def save(self, user_id: str, data_type: str, items: list) -> bool:
        """Overwrite the file with the given items."""
        path = self._path_for(user_id, data_type)
        if path is None:
            return False
        try:
            path.parent.mkdir(exist_ok=True)
            path.write_text(json.dumps(items, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to write {path}: {e}")
            return False
        return True

    def list(self, user_id: str) -> set[str]:
        """Data types with a file for this user."""
        user_dir = self._user_dir(user_id)
        if user_dir is None or not user_dir.is_dir():
            return set()
        return {path.stem for path in user_dir.glob("*.json")}

    def clear(self) -> None:
        for path in self.data_dir.iterdir():
            if path.is_dir():
                shutil.rmtree(path)
