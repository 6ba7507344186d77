"""Schema definitions for parsed transcript records and their summary.

A transcript line is one JSON object. Only the fields the analyzer uses
are modelled; everything else in the record is ignored.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TranscriptEntry:
    """One parsed activity record.

    Attributes:
        entry_type: Record type (``message``, ``tool_result``, ...).
        timestamp: When the record was written, if parseable.
        role: Author role for message records (``assistant``, ``user``).
        text: Free text of a message record.
        status: ``details.status`` when present.
        error: ``details.error`` when present, stringified.
    """

    entry_type: str | None = None
    timestamp: datetime | None = None
    role: str | None = None
    text: str | None = None
    status: str | None = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.status == "error" or self.error is not None

    @property
    def is_assistant_utterance(self) -> bool:
        return self.entry_type == "message" and self.role == "assistant" and bool(self.text)


@dataclass
class TranscriptSummary:
    """Signals extracted from the recent window of one transcript.

    The zero value (all defaults) means "no data" and yields no alerts.

    Attributes:
        last_activity: Latest record timestamp seen.
        error_count: Records carrying an error marker.
        last_error_message: Error text of the latest error record.
        help_requested: True if the latest assistant utterance matched a rule.
        help_message: Label of the matching rule.
        help_rule: Name of the matching rule.
        records_seen: Lines inspected.
        records_skipped: Lines that failed to parse.
    """

    last_activity: datetime | None = None
    error_count: int = 0
    last_error_message: str | None = None
    help_requested: bool = False
    help_message: str | None = None
    help_rule: str | None = None
    records_seen: int = 0
    records_skipped: int = 0
