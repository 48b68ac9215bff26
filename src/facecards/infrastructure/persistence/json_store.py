"""
JSON state stores: infrastructure adapters for the StateStore port.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from facecards.domain.ports import StateStore

logger = logging.getLogger(__name__)


class JsonFileStore(StateStore):
    """
    Keeps each record in ``<state_dir>/<name>.json``.

    Writes go through a temp file and an atomic rename, so a crash loses at
    most the write in flight. Unreadable files are reported and treated as
    missing.
    """

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)

    def _path(self, name: str) -> Path:
        return self.state_dir / f"{name}.json"

    def load(self, name: str) -> Any | None:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {path}, treating as empty: {e}")
            return None

    def save(self, name: str, record: Any) -> None:
        path = self._path(name)
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.state_dir, prefix=f".{name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(record, f)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to save {path}: {e}")

    def clear(self, name: str) -> None:
        try:
            self._path(name).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove {self._path(name)}: {e}")


class MemoryStore(StateStore):
    """Process-local store. Records are round-tripped through JSON like the file store."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._records: dict[str, str] = {k: json.dumps(v) for k, v in (initial or {}).items()}

    def load(self, name: str) -> Any | None:
        raw = self._records.get(name)
        return None if raw is None else json.loads(raw)

    def save(self, name: str, record: Any) -> None:
        self._records[name] = json.dumps(record)

    def clear(self, name: str) -> None:
        self._records.pop(name, None)

    def __contains__(self, name: str) -> bool:
        return name in self._records
