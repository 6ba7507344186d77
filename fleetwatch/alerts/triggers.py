"""Stateless trigger functions for alert synthesis.

Each function checks a single condition for one session and returns an
Alert if the condition is met, or None otherwise. Severity is always a
pure function of the kind-specific magnitude (error count, idle minutes,
token count). No I/O, no state: transcript reading, suppression and
ranking live in ``AlertMonitor``.
"""

from datetime import datetime, timedelta

from fleetwatch.alerts.identity import auto_alert_id
from fleetwatch.alerts.schemas import AgentRef, Alert, to_epoch_ms
from fleetwatch.analysis.config import AnalysisConfig
from fleetwatch.analysis.schemas import TranscriptSummary
from fleetwatch.sessions.schemas import SessionMetadata


# ── Severity functions ───────────────────────────────────


def error_severity(error_count: int, config: AnalysisConfig) -> str | None:
    """Severity for an error count, or None when there are no errors."""
    if error_count <= 0:
        return None
    if error_count > config.error_critical_count:
        return "critical"
    if error_count > config.error_high_count:
        return "high"
    return "medium"


def idle_severity(idle_minutes: float, config: AnalysisConfig) -> str | None:
    """Severity for an idle duration, or None below the stuck threshold."""
    if idle_minutes <= config.idle_threshold_minutes:
        return None
    if idle_minutes > config.idle_medium_minutes:
        return "medium"
    return "low"


def token_severity(total_tokens: int | None, config: AnalysisConfig) -> str | None:
    """Severity for total token usage, or None below the threshold."""
    if total_tokens is None or total_tokens <= config.token_usage_threshold:
        return None
    if total_tokens > config.token_usage_high:
        return "high"
    return "medium"


# ── Triggers ─────────────────────────────────────────────


def _make_alert(
    session: SessionMetadata,
    kind: str,
    severity: str,
    message: str,
    now: datetime,
    details: str | None = None,
) -> Alert:
    generation = to_epoch_ms(now)
    return Alert(
        alert_id=auto_alert_id(session.session_id, kind, generation),
        kind=kind,
        severity=severity,
        agent=AgentRef(
            agent_id=session.key.raw,
            agent_name=session.agent_name,
            session_id=session.session_id,
        ),
        message=message,
        details=details,
        timestamp=now,
        generation=generation,
    )


def is_stale(session: SessionMetadata, config: AnalysisConfig, now: datetime) -> bool:
    """True if the session has not been updated within the stale window."""
    return now - session.updated_at > timedelta(hours=config.stale_session_hours)


def check_error(
    session: SessionMetadata,
    summary: TranscriptSummary,
    config: AnalysisConfig,
    now: datetime,
) -> Alert | None:
    """Fire when recent activity carries error markers.

    Critical above ``error_critical_count`` errors, high above
    ``error_high_count``, medium otherwise.
    """
    severity = error_severity(summary.error_count, config)
    if severity is None:
        return None

    return _make_alert(
        session,
        kind="error",
        severity=severity,
        message=f"{summary.error_count} error(s) detected in recent activity",
        details=summary.last_error_message,
        now=now,
    )


def check_help_needed(
    session: SessionMetadata,
    summary: TranscriptSummary,
    now: datetime,
) -> Alert | None:
    """Fire when the latest assistant utterance matched a help rule. Always high."""
    if not summary.help_requested or not summary.help_message:
        return None

    return _make_alert(
        session,
        kind="help_needed",
        severity="high",
        message=summary.help_message,
        now=now,
    )


def check_stuck(
    session: SessionMetadata,
    summary: TranscriptSummary,
    config: AnalysisConfig,
    now: datetime,
) -> Alert | None:
    """Fire when the transcript has been idle past the stuck threshold.

    Medium past ``idle_medium_minutes``, low otherwise. A transcript with
    no timestamped activity produces nothing.
    """
    if summary.last_activity is None:
        return None

    idle_minutes = (now - summary.last_activity).total_seconds() / 60
    severity = idle_severity(idle_minutes, config)
    if severity is None:
        return None

    return _make_alert(
        session,
        kind="stuck",
        severity=severity,
        message=f"Agent idle for {round(idle_minutes)} minutes",
        details="May be stuck or waiting for external input",
        now=now,
    )


def check_aborted_run(session: SessionMetadata, now: datetime) -> Alert | None:
    """Fire when the previous run was forcefully terminated. Always high."""
    if not session.aborted_last_run:
        return None

    return _make_alert(
        session,
        kind="aborted_run",
        severity="high",
        message="Last run was aborted",
        details="The agent's previous execution was forcefully terminated",
        now=now,
    )


def check_high_token_usage(
    session: SessionMetadata,
    config: AnalysisConfig,
    now: datetime,
) -> Alert | None:
    """Fire when total tokens exceed the usage threshold.

    High past ``token_usage_high``, medium otherwise.
    """
    severity = token_severity(session.total_tokens, config)
    if severity is None:
        return None

    return _make_alert(
        session,
        kind="high_token_usage",
        severity=severity,
        message=f"High token usage: {session.total_tokens / 1000:.1f}k tokens",
        details="Consider compacting context or reviewing task scope",
        now=now,
    )


def synthesize_session_alerts(
    session: SessionMetadata,
    summary: TranscriptSummary,
    config: AnalysisConfig,
    now: datetime,
) -> list[Alert]:
    """Run all triggers for a single session.

    Stale sessions produce nothing regardless of their data.

    Args:
        session: Session metadata.
        summary: Signals from the session's recent transcript.
        config: Thresholds.
        now: Synthesis time, shared by every alert of the pass.

    Returns:
        List of candidate alerts (may be empty).
    """
    if is_stale(session, config, now):
        return []

    candidates = [
        check_aborted_run(session, now),
        check_high_token_usage(session, config, now),
        check_error(session, summary, config, now),
        check_help_needed(session, summary, now),
        check_stuck(session, summary, config, now),
    ]
    return [alert for alert in candidates if alert is not None]
