"""Alert monitor orchestrating per-session analysis, suppression, and ranking.

Recomputes the candidate alert list on every call: list sessions, read
each live session's transcript tail (bounded fan-out), run the stateless
triggers, drop candidates whose dismissal pattern is recorded in the
store, and rank the rest. Nothing computed here is written back.
"""

import asyncio
import logging
import time
from datetime import datetime

from fleetwatch.alerts.identity import dismissal_pattern
from fleetwatch.alerts.ranking import AlertSummary, summarize_alerts
from fleetwatch.alerts.schemas import Alert, utc_now
from fleetwatch.alerts.store import AlertStore
from fleetwatch.alerts.triggers import is_stale, synthesize_session_alerts
from fleetwatch.analysis.config import AnalysisConfig
from fleetwatch.analysis.parser import summarize_transcript
from fleetwatch.observability.metrics import MetricsCollector, get_metrics
from fleetwatch.sessions.directory import SessionDirectory
from fleetwatch.sessions.schemas import SessionMetadata
from fleetwatch.sessions.transcripts import TranscriptReader

logger = logging.getLogger(__name__)


class AlertMonitor:
    """Builds the ranked, de-duplicated alert list for the agent fleet.

    Combines the session directory, transcript reader and stateless
    trigger functions, following the orchestrator pattern of keeping
    all I/O here and all classification in pure functions.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        directory: SessionDirectory,
        transcripts: TranscriptReader,
        store: AlertStore | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._config = config
        self._directory = directory
        self._transcripts = transcripts
        self._store = store
        self._metrics = metrics or get_metrics()

    async def analyze_session(self, session: SessionMetadata, now: datetime) -> list[Alert]:
        """Synthesise candidate alerts for one session.

        Stale sessions are skipped before their transcript is read.

        Args:
            session: Session metadata.
            now: Synthesis time.

        Returns:
            Candidate alerts for this session.
        """
        if is_stale(session, self._config, now):
            self._metrics.record_session("stale")
            return []

        lines = await self._transcripts.read_recent(
            session.session_id, limit=self._config.transcript_tail_records,
        )
        summary = summarize_transcript(lines)
        self._metrics.record_skipped_records(summary.records_skipped)

        alerts = synthesize_session_alerts(session, summary, self._config, now)
        self._metrics.record_session("analyzed")
        for alert in alerts:
            self._metrics.record_alert_synthesized(alert.kind, alert.severity)
        return alerts

    async def _dismissed_patterns(self) -> frozenset[str]:
        if self._store is None:
            return frozenset()
        return await self._store.dismissed_patterns()

    async def _analyze_all(
        self,
        sessions: list[SessionMetadata],
        now: datetime,
    ) -> list[Alert]:
        semaphore = asyncio.Semaphore(self._config.max_concurrent_reads)

        async def bounded(session: SessionMetadata) -> list[Alert]:
            async with semaphore:
                return await self.analyze_session(session, now)

        results = await asyncio.gather(
            *(bounded(s) for s in sessions), return_exceptions=True,
        )

        candidates: list[Alert] = []
        for session, result in zip(sessions, results):
            if isinstance(result, Exception):
                self._metrics.record_session("failed")
                logger.warning(
                    "Alert analysis failed for session %s: %s", session.session_id, result,
                )
                continue
            if isinstance(result, BaseException):
                raise result
            candidates.extend(result)
        return candidates

    async def list_alerts(
        self,
        *,
        include_persisted: bool = False,
        now: datetime | None = None,
    ) -> AlertSummary:
        """Main entry point: analyse all sessions and rank the results.

        Never raises for data problems: an unreadable directory, transcript
        or store degrades to fewer (or no) alerts.

        Args:
            include_persisted: Also merge unresolved alerts from the store.
            now: Synthesis time (defaults to the current time).

        Returns:
            AlertSummary with ranked alerts and counts.
        """
        start_time = time.perf_counter()
        now = now or utc_now()

        try:
            sessions = await self._directory.list_sessions()
            candidates = await self._analyze_all(list(sessions.values()), now)

            dismissed = await self._dismissed_patterns()
            visible: list[Alert] = []
            for alert in candidates:
                if dismissal_pattern(alert.agent.session_id or "", alert.kind) in dismissed:
                    self._metrics.record_alert_suppressed(alert.kind)
                    continue
                visible.append(alert)

            if include_persisted and self._store is not None:
                visible.extend(await self._store.list_alerts(resolved=False))

            summary = summarize_alerts(visible, now)
        except Exception as e:
            logger.error("Alert analysis failed: %s", e, exc_info=True)
            summary = AlertSummary(timestamp=now)

        latency = time.perf_counter() - start_time
        self._metrics.record_list_latency(latency)
        logger.info(
            "Alerts computed: %d total, %d critical, %d high (%.1f ms)",
            summary.total,
            summary.critical_count,
            summary.high_count,
            latency * 1000,
        )
        return summary
