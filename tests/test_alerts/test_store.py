"""Tests for the file-backed AlertStore."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from fleetwatch.alerts.config import AlertStoreConfig
from fleetwatch.alerts.store import (
    SCHEMA_VERSION,
    AlertNotFoundError,
    AlertPersistenceError,
    AlertsDocument,
    AlertStore,
)

TS_MS = 1_770_465_600_000


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "squad" / "alerts" / "alerts.json"


@pytest.fixture
def store(store_path, mock_metrics):
    return AlertStore(store_path, config=AlertStoreConfig(), metrics=mock_metrics)


def _seed(path, alerts=None, patterns=None):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({
        "alerts": alerts or [],
        "dismissedPatterns": patterns or [],
        "lastUpdated": TS_MS,
    }), encoding="utf-8")


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


def _legacy(alert_id="alert-abc12345-1", **overrides):
    record = {
        "id": alert_id,
        "type": "help_needed",
        "priority": "needs-input",
        "agent": "builder",
        "message": "Which branch should I target?",
        "timestamp": TS_MS,
        "acknowledged": False,
    }
    record.update(overrides)
    return record


# ── Reads ────────────────────────────────────────────────


class TestLoad:

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, store):
        document = await store.load()
        assert document.alerts == []
        assert document.dismissed_patterns == []

    @pytest.mark.asyncio
    async def test_corrupt_file_is_empty(self, store, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("{definitely not json", encoding="utf-8")
        assert (await store.load()).alerts == []

    @pytest.mark.asyncio
    async def test_non_object_is_empty(self, store, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("[]", encoding="utf-8")
        assert (await store.load()).alerts == []

    @pytest.mark.asyncio
    async def test_skips_unreadable_records(self, store, store_path):
        _seed(store_path, alerts=[_legacy(), {"no": "id"}, "junk", _legacy("alert-2", kind="nonsense")])
        document = await store.load()
        assert [a.alert_id for a in document.alerts] == ["alert-abc12345-1"]

    @pytest.mark.asyncio
    async def test_dedups_patterns(self, store, store_path):
        _seed(store_path, patterns=["auto-s1-error", "auto-s1-error", 7, "auto-s2-stuck"])
        assert await store.dismissed_patterns() == frozenset({"auto-s1-error", "auto-s2-stuck"})

    @pytest.mark.asyncio
    async def test_unreadable_records_survive_other_mutations(self, store, store_path):
        unknown_type = _legacy("legacy-1", type="blocked_on_review")
        bad_timestamp = _legacy("legacy-2", timestamp=float("inf"))
        _seed(store_path, alerts=[unknown_type, bad_timestamp, _legacy("a2"), "junk"])

        await store.update_alert("a2", resolved=True)

        stored = _read(store_path)["alerts"]
        assert [r["id"] for r in stored[:3]] == ["a2", "legacy-1", "legacy-2"]
        assert stored[1] == unknown_type
        assert stored[3] == "junk"
        assert stored[0]["resolved"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("document", [
        {"alerts": [], "dismissedPatterns": 5},
        {"alerts": 5, "dismissedPatterns": []},
        {"alerts": [], "lastUpdated": "not a time"},
    ])
    async def test_wrong_shaped_fields_degrade(self, store, store_path, document):
        store_path.parent.mkdir(parents=True)
        store_path.write_text(json.dumps(document), encoding="utf-8")

        loaded = await store.load()

        assert loaded.alerts == []
        assert loaded.dismissed_patterns == []


class TestGetAndList:

    @pytest.mark.asyncio
    async def test_get_alert(self, store, store_path):
        _seed(store_path, alerts=[_legacy()])
        alert = await store.get_alert("alert-abc12345-1")
        assert alert.severity == "medium"
        assert alert.priority == "needs-input"

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        with pytest.raises(AlertNotFoundError) as exc_info:
            await store.get_alert("alert-missing")
        assert exc_info.value.alert_id == "alert-missing"

    @pytest.mark.asyncio
    async def test_list_filters_resolved(self, store, store_path):
        _seed(store_path, alerts=[_legacy("a1"), _legacy("a2", acknowledged=True)])
        assert [a.alert_id for a in await store.list_alerts()] == ["a1", "a2"]
        assert [a.alert_id for a in await store.list_alerts(resolved=False)] == ["a1"]
        assert [a.alert_id for a in await store.list_alerts(resolved=True)] == ["a2"]


# ── Updates ──────────────────────────────────────────────


class TestUpdateAlert:

    @pytest.mark.asyncio
    async def test_resolve_stamps_both_fields(self, store, store_path):
        _seed(store_path, alerts=[_legacy()])

        result = await store.update_alert("alert-abc12345-1", resolved=True)

        assert not result.dismissed
        assert result.alert.resolved_at is not None
        assert result.alert.resolved_by == "human"
        stored = _read(store_path)["alerts"][0]
        assert stored["resolved"] is True
        assert stored["acknowledged"] is True
        assert "resolvedAt" in stored
        assert stored["resolvedBy"] == "human"

    @pytest.mark.asyncio
    async def test_reopen_clears_both_fields(self, store, store_path):
        _seed(store_path, alerts=[_legacy()])
        await store.update_alert("alert-abc12345-1", resolved=True, resolved_by="ops")

        result = await store.update_alert("alert-abc12345-1", resolved=False)

        assert result.alert.resolved_at is None
        assert result.alert.resolved_by is None
        stored = _read(store_path)["alerts"][0]
        assert "resolvedAt" not in stored
        assert "resolvedBy" not in stored

    @pytest.mark.asyncio
    async def test_explicit_resolver(self, store, store_path):
        _seed(store_path, alerts=[_legacy()])
        result = await store.update_alert("alert-abc12345-1", resolved=True, resolved_by="ops")
        assert result.alert.resolved_by == "ops"

    @pytest.mark.asyncio
    async def test_priority_maps_to_severity(self, store, store_path):
        _seed(store_path, alerts=[_legacy()])
        result = await store.update_alert("alert-abc12345-1", priority="urgent")
        assert result.alert.severity == "critical"
        assert _read(store_path)["alerts"][0]["priority"] == "urgent"

    @pytest.mark.asyncio
    async def test_invalid_priority_ignored(self, store, store_path):
        _seed(store_path, alerts=[_legacy()])
        result = await store.update_alert("alert-abc12345-1", priority="whenever")
        assert result.alert.priority == "needs-input"

    @pytest.mark.asyncio
    async def test_details_only_when_supplied(self, store, store_path):
        _seed(store_path, alerts=[_legacy(details="original")])

        result = await store.update_alert("alert-abc12345-1", priority="info")
        assert result.alert.details == "original"

        result = await store.update_alert("alert-abc12345-1", details=None)
        assert result.alert.details is None

    @pytest.mark.asyncio
    async def test_missing_id_raises(self, store):
        with pytest.raises(AlertNotFoundError):
            await store.update_alert("alert-missing", resolved=True)

    @pytest.mark.asyncio
    async def test_mutation_stamps_last_updated(self, store, store_path):
        _seed(store_path, alerts=[_legacy()])
        await store.update_alert("alert-abc12345-1", resolved=True)
        data = _read(store_path)
        assert data["lastUpdated"] > TS_MS
        assert data["schemaVersion"] == SCHEMA_VERSION


class TestAutoAlertDismissal:

    @pytest.mark.asyncio
    async def test_resolve_auto_id_records_pattern(self, store, store_path):
        result = await store.update_alert("auto-s1-error-1700000000000", resolved=True)

        assert result.dismissed
        assert result.dismissed_pattern == "auto-s1-error"
        assert _read(store_path)["dismissedPatterns"] == ["auto-s1-error"]
        assert _read(store_path)["alerts"] == []

    @pytest.mark.asyncio
    async def test_dismissal_is_idempotent(self, store, store_path):
        await store.update_alert("auto-s1-error-1700000000000", resolved=True)
        await store.update_alert("auto-s1-error-1700000099999", resolved=True)
        await store.delete_alert("auto-s1-error-1700000012345")

        assert _read(store_path)["dismissedPatterns"] == ["auto-s1-error"]

    @pytest.mark.asyncio
    async def test_repeat_dismissal_does_not_write(self, store, store_path):
        _seed(store_path, patterns=["auto-s1-error"])
        before = store_path.read_text(encoding="utf-8")

        result = await store.update_alert("auto-s1-error-1", resolved=True)

        assert result.dismissed_pattern == "auto-s1-error"
        assert store_path.read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_session_id_with_digits(self, store, store_path):
        result = await store.delete_alert("auto-run-42-stuck-1700000000000")
        assert result.dismissed_pattern == "auto-run-42-stuck"

    @pytest.mark.asyncio
    async def test_unresolving_auto_id_needs_a_record(self, store):
        with pytest.raises(AlertNotFoundError):
            await store.update_alert("auto-s1-error-1", resolved=False)


class TestDeleteAlert:

    @pytest.mark.asyncio
    async def test_delete_removes_record(self, store, store_path):
        _seed(store_path, alerts=[_legacy("a1"), _legacy("a2")])

        result = await store.delete_alert("a1")

        assert result.alert.alert_id == "a1"
        assert [a["id"] for a in _read(store_path)["alerts"]] == ["a2"]

    @pytest.mark.asyncio
    async def test_delete_missing(self, store):
        with pytest.raises(AlertNotFoundError):
            await store.delete_alert("alert-missing")


class TestCreateAlert:

    @pytest.mark.asyncio
    async def test_create_persists(self, store, store_path):
        alert = await store.create_alert(
            agent="builder",
            message="Need prod credentials",
            priority="urgent",
            task_id="task-9",
        )

        assert alert.alert_id.startswith("alert-")
        assert alert.severity == "critical"
        assert alert.kind == "help_needed"
        assert alert.target_agent == "ryan"
        stored = _read(store_path)["alerts"]
        assert len(stored) == 1
        assert stored[0]["id"] == alert.alert_id
        assert stored[0]["taskId"] == "task-9"

    @pytest.mark.asyncio
    async def test_invalid_priority_becomes_info(self, store):
        alert = await store.create_alert(agent="builder", message="fyi", priority="asap")
        assert alert.priority == "info"
        assert alert.severity == "low"

    @pytest.mark.asyncio
    async def test_appends_to_existing(self, store, store_path):
        _seed(store_path, alerts=[_legacy()], patterns=["auto-s1-error"])
        await store.create_alert(agent="builder", message="second")
        data = _read(store_path)
        assert len(data["alerts"]) == 2
        assert data["dismissedPatterns"] == ["auto-s1-error"]

    @pytest.mark.asyncio
    async def test_records_metrics(self, store, mock_metrics):
        await store.create_alert(agent="builder", message="hello")
        mock_metrics.record_store_mutation.assert_called_with("create", "created")


class TestPersistenceFailures:

    @pytest.mark.asyncio
    async def test_unwritable_location(self, tmp_path, mock_metrics):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = AlertStore(blocker / "alerts.json", metrics=mock_metrics)

        assert await store.list_alerts() == []
        with pytest.raises(AlertPersistenceError):
            await store.create_alert(agent="builder", message="hello")
        mock_metrics.record_store_mutation.assert_called_with("create", "failed")

    @pytest.mark.asyncio
    async def test_failed_write_leaves_file_untouched(self, store, store_path):
        _seed(store_path, alerts=[_legacy()])
        before = store_path.read_text(encoding="utf-8")

        with patch.object(store._document, "write", AsyncMock(side_effect=OSError("disk full"))):
            with pytest.raises(AlertPersistenceError, match="disk full"):
                await store.update_alert("alert-abc12345-1", resolved=True)

        assert store_path.read_text(encoding="utf-8") == before


class TestAlertsDocument:

    def test_to_dict_shape(self):
        document = AlertsDocument(
            dismissed_patterns=["auto-s1-error"],
            last_updated=datetime(2026, 2, 7, 12, tzinfo=timezone.utc),
        )
        assert document.to_dict() == {
            "schemaVersion": SCHEMA_VERSION,
            "alerts": [],
            "dismissedPatterns": ["auto-s1-error"],
            "lastUpdated": TS_MS,
        }

    def test_dismiss_returns_whether_new(self):
        document = AlertsDocument()
        assert document.dismiss("auto-s1-error") is True
        assert document.dismiss("auto-s1-error") is False
        assert document.dismissed_patterns == ["auto-s1-error"]
