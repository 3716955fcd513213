"""
storage.py - durable local key-value storage

All values live in one JSON object on disk: {key: value, ...}. Every set()
rewrites the whole file atomically (temp file + move), so a crash never
leaves a half-written file behind.
"""

from typing import Any, Dict, Optional
import json
import os
import shutil
import tempfile
import logging

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, path: str):
        self.path = os.path.abspath(path)

    def _read_all(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Could not read storage file %s, treating it as empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold an object, ignoring it", self.path)
            return {}
        return data

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any):
        """Store value under key and persist the whole file."""
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _write_all(self, data: Dict[str, Any]):
        dirn = os.path.dirname(self.path)
        os.makedirs(dirn, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix="tmp_finansmart_", dir=dirn, text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            shutil.move(tmp_path, self.path)
        except Exception:
            logger.exception("Failed to write storage file %s", self.path)
            # try to remove tmp file if present
            try:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
            except OSError:
                pass
            raise
