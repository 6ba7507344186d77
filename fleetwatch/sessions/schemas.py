"""Schema definitions for agent session metadata.

The session directory is a JSON object keyed by structured session keys
(``namespace:host:type[:subId]``). Each value carries lightweight run
metadata. Entries that do not carry the required fields are not modelled;
``SessionMetadata.from_entry`` returns None for them so callers never
probe optional fields ad hoc.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

SessionType = Literal["main", "subagent", "cron", "unknown"]

VALID_SESSION_TYPES: frozenset[str] = frozenset({
    "main",
    "subagent",
    "cron",
    "unknown",
})


@dataclass(frozen=True)
class SessionKey:
    """Parsed form of a session directory key.

    Attributes:
        raw: The key exactly as it appears in the directory.
        namespace: First segment (e.g. ``agent``).
        host: Second segment (the owning agent host).
        session_type: main, subagent, cron, or unknown.
        sub_id: Fourth segment for subagent/cron sessions.
    """

    raw: str
    namespace: str | None
    host: str | None
    session_type: SessionType
    sub_id: str | None = None

    @classmethod
    def parse(cls, key: str) -> "SessionKey":
        parts = key.split(":")
        namespace = parts[0] if len(parts) > 0 and parts[0] else None
        host = parts[1] if len(parts) > 1 and parts[1] else None
        kind = parts[2] if len(parts) > 2 else ""
        sub_id = parts[3] if len(parts) > 3 and parts[3] else None

        session_type: SessionType = kind if kind in VALID_SESSION_TYPES else "unknown"  # type: ignore[assignment]
        return cls(
            raw=key,
            namespace=namespace,
            host=host,
            session_type=session_type,
            sub_id=sub_id,
        )

    @property
    def display_name(self) -> str:
        """Operator-facing agent name."""
        short_id = (self.sub_id or "unknown")[:8]
        if self.session_type == "main":
            return "Main Agent"
        if self.session_type == "subagent":
            return f"Subagent {short_id}"
        if self.session_type == "cron":
            return f"Cron {short_id}"
        return self.raw


@dataclass
class SessionMetadata:
    """Read-only metadata for one agent session.

    Attributes:
        key: Parsed session directory key.
        session_id: Identifier of the session's transcript.
        updated_at: Last time the session was touched.
        total_tokens: Context tokens consumed, if reported.
        aborted_last_run: True if the previous run was forcefully terminated.
        model: Model name, if reported.
    """

    key: SessionKey
    session_id: str
    updated_at: datetime
    total_tokens: int | None = None
    aborted_last_run: bool = False
    model: str | None = None

    @property
    def agent_name(self) -> str:
        return self.key.display_name

    @classmethod
    def from_entry(cls, key: str, entry: Any) -> "SessionMetadata | None":
        """Build metadata from one directory entry.

        Args:
            key: Directory key.
            entry: Raw JSON value for the key.

        Returns:
            SessionMetadata, or None if the entry lacks ``sessionId`` or a
            numeric ``updatedAt`` (epoch milliseconds).
        """
        if not isinstance(entry, dict):
            return None

        session_id = entry.get("sessionId")
        updated_at = entry.get("updatedAt")
        if not isinstance(session_id, str) or not session_id:
            return None
        if isinstance(updated_at, bool) or not isinstance(updated_at, (int, float)):
            return None
        try:
            updated = datetime.fromtimestamp(updated_at / 1000, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return None

        total_tokens = entry.get("totalTokens")
        if (
            isinstance(total_tokens, bool)
            or not isinstance(total_tokens, (int, float))
            or not math.isfinite(total_tokens)
        ):
            total_tokens = None

        model = entry.get("model")

        return cls(
            key=SessionKey.parse(key),
            session_id=session_id,
            updated_at=updated,
            total_tokens=int(total_tokens) if total_tokens is not None else None,
            aborted_last_run=entry.get("abortedLastRun") is True,
            model=model if isinstance(model, str) else None,
        )
