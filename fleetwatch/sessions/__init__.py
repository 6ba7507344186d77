"""Session directory and transcript access.

Components:
- SessionKey / SessionMetadata: Parsed session index entries
- SessionDirectory: Lists sessions from sessions.json
- TranscriptReader: Bounded tail reads of <sessionId>.jsonl
"""

from fleetwatch.sessions.directory import SessionDirectory
from fleetwatch.sessions.schemas import (
    VALID_SESSION_TYPES,
    SessionKey,
    SessionMetadata,
    SessionType,
)
from fleetwatch.sessions.transcripts import TranscriptReader

__all__ = [
    "SessionDirectory",
    "SessionKey",
    "SessionMetadata",
    "SessionType",
    "TranscriptReader",
    "VALID_SESSION_TYPES",
]
