"""Transcript provider: bounded tail reads of per-session activity logs.

Each session writes an append-only ``<sessionId>.jsonl`` file next to the
session index. Only the most recent records are ever needed, so the file
is streamed through a bounded deque rather than loaded and sliced.
"""

import asyncio
import logging
from collections import deque
from pathlib import Path

logger = logging.getLogger(__name__)


class TranscriptReader:
    """Reads the most recent activity records for a session."""

    def __init__(self, sessions_dir: Path) -> None:
        self._sessions_dir = Path(sessions_dir)

    def transcript_path(self, session_id: str) -> Path | None:
        """Resolve a session's transcript file, or None for unsafe ids."""
        if not session_id or "/" in session_id or "\\" in session_id or session_id in (".", ".."):
            return None
        return self._sessions_dir / f"{session_id}.jsonl"

    async def read_recent(self, session_id: str, limit: int = 100) -> list[str]:
        """Return the last ``limit`` non-blank lines of the transcript.

        Args:
            session_id: Session whose transcript to read.
            limit: Maximum number of records.

        Returns:
            Lines in file order. Empty if the transcript is missing or
            unreadable.
        """
        path = self.transcript_path(session_id)
        if path is None:
            logger.warning("Refusing transcript read for session id %r", session_id)
            return []

        try:
            return await asyncio.to_thread(_tail_lines, path, limit)
        except FileNotFoundError:
            logger.debug("No transcript for session %s", session_id)
            return []
        except OSError as e:
            logger.warning("Transcript unreadable for session %s: %s", session_id, e)
            return []


def _tail_lines(path: Path, limit: int) -> list[str]:
    if limit <= 0:
        return []
    # Undecodable bytes become U+FFFD so only the affected record fails to parse
    with path.open("r", encoding="utf-8", errors="replace") as f:
        tail = deque((line for line in f if line.strip()), maxlen=limit)
    return [line.rstrip("\n") for line in tail]
