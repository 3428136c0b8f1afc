"""JSON files on local disk as the process-local state store."""

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Union

from ...domain.ports.verdict_store import StateStore, StorageError

logger = logging.getLogger(__name__)

VERDICTS_FILE = "verdicts.json"
PROCESSED_FILE = "verified-posts.json"


class JsonFileStore(StateStore):
    """Keeps the verdict log and processed ids as JSON files in one directory.

    A missing or unreadable file loads as empty. Writes go through a temp file
    and ``os.replace`` so a crash never leaves half a file behind.
    """

    def __init__(self, directory: Union[str, Path] = "memory"):
        self.directory = Path(directory)

    def _load(self, name: str) -> List[Any]:
        path = self.directory / name
        if not path.exists():
            return []
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Could not read {path}, starting empty: {e}")
            return []
        return data if isinstance(data, list) else []

    def _save(self, name: str, data: List[Any]) -> None:
        path = self.directory / name
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, path)
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}")

    def load_verdicts(self) -> List[dict]:
        return [entry for entry in self._load(VERDICTS_FILE) if isinstance(entry, dict)]

    def save_verdicts(self, verdicts: List[dict]) -> None:
        self._save(VERDICTS_FILE, verdicts)

    def load_processed_ids(self) -> List[str]:
        return [str(claim_id) for claim_id in self._load(PROCESSED_FILE)]

    def save_processed_ids(self, claim_ids: List[str]) -> None:
        self._save(PROCESSED_FILE, list(claim_ids))
