import json
import logging
import os
import tempfile
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

DATASOURCES_FILE = "datasources.json"
RELATIONSHIPS_FILE = "relationships.json"


class ConfigStore:
    """
    JSON documents on disk: the data source list and the relationship map.
    A missing file reads as an empty collection. Writes replace the file
    atomically; concurrent writers are not serialized, the last one wins.
    """

    def __init__(self, config_dir: str):
        self.config_dir = config_dir

    def _path(self, filename: str) -> str:
        return os.path.join(self.config_dir, filename)

    def _read(self, filename: str, empty: Any) -> Any:
        path = self._path(filename)
        if not os.path.exists(path):
            return empty
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading {path}: {e}")
            return empty
        if not isinstance(data, type(empty)):
            logger.error(f"Ignoring {path}: expected a JSON {type(empty).__name__}")
            return empty
        return data

    def _write(self, filename: str, data: Any) -> None:
        os.makedirs(self.config_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.config_dir, prefix=f".{filename}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path(filename))
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def load_datasources(self) -> List[Dict[str, Any]]:
        return self._read(DATASOURCES_FILE, [])

    def save_datasources(self, sources: List[Dict[str, Any]]) -> None:
        self._write(DATASOURCES_FILE, sources)

    def load_relationships(self) -> Dict[str, Any]:
        return self._read(RELATIONSHIPS_FILE, {})

    def save_relationships(self, relationships: Dict[str, Any]) -> None:
        self._write(RELATIONSHIPS_FILE, relationships)
