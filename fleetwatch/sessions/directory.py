"""Session directory reader.

Enumerates known agent sessions from ``sessions.json`` in the configured
sessions directory. A missing or unreadable directory file is "no data":
the reader returns an empty mapping and logs, it never raises.
"""

import asyncio
import json
import logging
from pathlib import Path

from fleetwatch.sessions.schemas import SessionMetadata

logger = logging.getLogger(__name__)

SESSIONS_INDEX = "sessions.json"


class SessionDirectory:
    """Lists sessions and their lightweight metadata."""

    def __init__(self, sessions_dir: Path) -> None:
        self._sessions_dir = Path(sessions_dir)

    @property
    def index_path(self) -> Path:
        return self._sessions_dir / SESSIONS_INDEX

    async def list_sessions(self) -> dict[str, SessionMetadata]:
        """Read the session index.

        Returns:
            Mapping of session key to metadata. Entries with an
            unrecognised shape are skipped.
        """
        try:
            raw = await asyncio.to_thread(self.index_path.read_text, "utf-8")
            data = json.loads(raw)
        except FileNotFoundError:
            logger.debug("Session index not found at %s", self.index_path)
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Session index unreadable at %s: %s", self.index_path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Session index at %s is not an object", self.index_path)
            return {}

        sessions: dict[str, SessionMetadata] = {}
        for key, entry in data.items():
            metadata = SessionMetadata.from_entry(key, entry)
            if metadata is None:
                logger.debug("Skipping unrecognised session entry %s", key)
                continue
            sessions[key] = metadata

        return sessions
