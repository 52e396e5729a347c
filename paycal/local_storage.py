import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    Named string slots kept in one JSON file on this device,
    the same shape as a browser's localStorage.
    Every set_item/remove_item rewrites the file immediately.

    Route handlers run on a threadpool, so callers doing read-modify-write over
    several slots hold `lock` (re-entrant) for the whole sequence.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.lock = threading.RLock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not an object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, slots: Dict[str, str]) -> None:
        # temp file + os.replace: readers see the old file or the new one, never half of it
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(slots, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_item(self, key: str) -> Optional[str]:
        with self.lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self.lock:
            slots = self._read_all()
            slots[key] = value
            self._write_all(slots)

    def remove_item(self, key: str) -> None:
        with self.lock:
            slots = self._read_all()
            if slots.pop(key, None) is not None:
                self._write_all(slots)
