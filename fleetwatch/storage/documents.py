"""
Whole-document JSON file persistence.

Every write replaces the entire document: the payload is written to a
temporary file in the same directory and renamed over the target, so a
reader never observes a partially written document. There is no locking
and no version token; concurrent writers race and the last rename wins.
"""

import asyncio
import json
import logging
import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonDocument:
    """
    A single JSON document backed by a file.

    Usage:
        doc = JsonDocument(Path("alerts.json"))
        data = await doc.read()        # None if missing
        await doc.write({"alerts": []})
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    async def read(self) -> Any | None:
        """
        Load and decode the document.

        Returns:
            Decoded JSON value, or None if the file does not exist.

        Raises:
            OSError: If the file exists but cannot be read.
            ValueError: If the contents are not valid JSON.
        """
        try:
            raw = await asyncio.to_thread(self._path.read_text, "utf-8")
        except FileNotFoundError:
            return None
        return json.loads(raw)

    async def write(self, data: Any) -> None:
        """
        Atomically replace the document.

        Raises:
            OSError: If the temporary file cannot be written or renamed.
        """
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        await asyncio.to_thread(_atomic_write, self._path, payload)


def _atomic_write(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with suppress(OSError):
            os.unlink(tmp_name)
        raise
