"""Pytest fixtures for fleetwatch tests."""

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from fleetwatch.analysis.config import AnalysisConfig
from fleetwatch.config.settings import get_settings
from fleetwatch.observability.metrics import MetricsCollector
from fleetwatch.sessions.schemas import SessionKey, SessionMetadata

NOW = datetime(2026, 2, 7, 12, 0, 0, tzinfo=timezone.utc)


def make_session(
    session_id: str = "sess-main",
    key: str = "agent:main:main",
    updated_at: datetime = NOW,
    total_tokens: int | None = None,
    aborted_last_run: bool = False,
) -> SessionMetadata:
    """Create SessionMetadata with sensible defaults."""
    return SessionMetadata(
        key=SessionKey.parse(key),
        session_id=session_id,
        updated_at=updated_at,
        total_tokens=total_tokens,
        aborted_last_run=aborted_last_run,
    )


def assistant_line(text: str, timestamp: datetime = NOW) -> str:
    """One transcript line for an assistant message."""
    return json.dumps({
        "type": "message",
        "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
        "message": {"role": "assistant", "content": [{"type": "text", "text": text}]},
    })


def error_line(error: str | None = "boom", timestamp: datetime = NOW) -> str:
    """One transcript line for a failed tool result."""
    details = {"status": "error"}
    if error is not None:
        details["error"] = error
    return json.dumps({
        "type": "tool_result",
        "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
        "details": details,
    })


def write_sessions_index(sessions_dir: Path, entries: dict) -> None:
    sessions_dir.mkdir(parents=True, exist_ok=True)
    (sessions_dir / "sessions.json").write_text(json.dumps(entries), encoding="utf-8")


def write_transcript(sessions_dir: Path, session_id: str, lines: list[str]) -> None:
    sessions_dir.mkdir(parents=True, exist_ok=True)
    (sessions_dir / f"{session_id}.jsonl").write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def analysis_config() -> AnalysisConfig:
    return AnalysisConfig()


@pytest.fixture
def mock_metrics():
    """Metrics stand-in (the real collector registers process-global series)."""
    return MagicMock(spec=MetricsCollector)


@pytest.fixture
def sessions_dir(tmp_path) -> Path:
    path = tmp_path / "sessions"
    path.mkdir()
    return path


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at a temporary workspace and sessions directory."""
    from fleetwatch.api.dependencies import reset_dependencies

    sessions = tmp_path / "sessions"
    workspace = tmp_path / "workspace"
    sessions.mkdir(exist_ok=True)
    workspace.mkdir(exist_ok=True)

    monkeypatch.setenv("SESSIONS_DIR", str(sessions))
    monkeypatch.setenv("WORKSPACE_PATH", str(workspace))
    monkeypatch.delenv("ALERTS_FILE", raising=False)
    monkeypatch.delenv("PENDING_NOTIFICATIONS_FILE", raising=False)
    monkeypatch.delenv("API_KEYS", raising=False)
    get_settings.cache_clear()
    reset_dependencies()

    yield get_settings()

    get_settings.cache_clear()
    reset_dependencies()
