"""Transcript parser.

Turns raw JSONL activity lines into ``TranscriptEntry`` records and folds
a window of them into a ``TranscriptSummary``. Pure functions: the caller
supplies the lines (see ``fleetwatch.sessions.transcripts``).
"""

import json
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from fleetwatch.analysis.patterns import HELP_RULES, HelpRule, match_help_rule
from fleetwatch.analysis.schemas import TranscriptEntry, TranscriptSummary

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch-milliseconds number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def _extract_text(content: Any) -> str | None:
    if isinstance(content, str):
        return content or None
    if not isinstance(content, list):
        return None
    parts = [
        block["text"]
        for block in content
        if isinstance(block, dict)
        and block.get("type") == "text"
        and isinstance(block.get("text"), str)
        and block["text"]
    ]
    return "\n".join(parts) if parts else None


def parse_record(line: str) -> TranscriptEntry | None:
    """Parse one transcript line.

    Args:
        line: Raw JSONL line.

    Returns:
        TranscriptEntry, or None if the line is not a JSON object.
    """
    try:
        data = json.loads(line)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    role = None
    text = None
    message = data.get("message")
    if isinstance(message, dict):
        role = message.get("role") if isinstance(message.get("role"), str) else None
        text = _extract_text(message.get("content"))

    status = None
    error = None
    details = data.get("details")
    if isinstance(details, dict):
        if isinstance(details.get("status"), str):
            status = details["status"]
        raw_error = details.get("error")
        if raw_error is not None and raw_error != "" and raw_error is not False:
            error = raw_error if isinstance(raw_error, str) else json.dumps(raw_error)

    entry_type = data.get("type")
    return TranscriptEntry(
        entry_type=entry_type if isinstance(entry_type, str) else None,
        timestamp=parse_timestamp(data.get("timestamp")),
        role=role,
        text=text,
        status=status,
        error=error,
    )


def summarize_transcript(
    lines: Iterable[str],
    rules: tuple[HelpRule, ...] = HELP_RULES,
) -> TranscriptSummary:
    """Fold a window of transcript lines into analysis signals.

    Malformed lines are skipped. The help rules are applied only to the
    most recent assistant utterance carrying text.

    Args:
        lines: Transcript lines in file order.
        rules: Help rules in priority order.

    Returns:
        TranscriptSummary (zero value when no line parses).
    """
    summary = TranscriptSummary()
    latest_utterance: str | None = None

    for line in lines:
        summary.records_seen += 1
        entry = parse_record(line)
        if entry is None:
            summary.records_skipped += 1
            continue

        if entry.timestamp is not None and (
            summary.last_activity is None or entry.timestamp > summary.last_activity
        ):
            summary.last_activity = entry.timestamp

        if entry.is_error:
            summary.error_count += 1
            summary.last_error_message = entry.error or UNKNOWN_ERROR

        if entry.is_assistant_utterance:
            latest_utterance = entry.text

    if summary.records_skipped:
        logger.debug(
            "Skipped %d malformed transcript records of %d",
            summary.records_skipped,
            summary.records_seen,
        )

    if latest_utterance is not None:
        rule = match_help_rule(latest_utterance, rules)
        if rule is not None:
            summary.help_requested = True
            summary.help_message = rule.message
            summary.help_rule = rule.name

    return summary
