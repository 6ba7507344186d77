"""Tests for atomic whole-document JSON persistence."""

import json
from unittest.mock import patch

import pytest

from fleetwatch.storage.documents import JsonDocument


@pytest.mark.asyncio
async def test_read_missing_returns_none(tmp_path):
    doc = JsonDocument(tmp_path / "missing.json")
    assert await doc.read() is None
    assert not doc.exists()


@pytest.mark.asyncio
async def test_write_creates_parents(tmp_path):
    doc = JsonDocument(tmp_path / "a" / "b" / "doc.json")
    await doc.write({"alerts": [], "note": "héllo"})

    assert doc.exists()
    assert json.loads(doc.path.read_text(encoding="utf-8")) == {"alerts": [], "note": "héllo"}
    assert await doc.read() == {"alerts": [], "note": "héllo"}


@pytest.mark.asyncio
async def test_write_replaces_whole_document(tmp_path):
    doc = JsonDocument(tmp_path / "doc.json")
    await doc.write({"a": 1, "b": 2})
    await doc.write({"c": 3})
    assert await doc.read() == {"c": 3}


@pytest.mark.asyncio
async def test_invalid_json_raises(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text("{nope", encoding="utf-8")
    with pytest.raises(ValueError):
        await JsonDocument(path).read()


@pytest.mark.asyncio
async def test_failed_replace_keeps_original_and_cleans_up(tmp_path):
    path = tmp_path / "doc.json"
    doc = JsonDocument(path)
    await doc.write({"version": 1})

    with patch("fleetwatch.storage.documents.os.replace", side_effect=OSError("rename failed")):
        with pytest.raises(OSError):
            await doc.write({"version": 2})

    assert await doc.read() == {"version": 1}
    assert [p.name for p in tmp_path.iterdir()] == ["doc.json"]


@pytest.mark.asyncio
async def test_unserialisable_payload_does_not_touch_file(tmp_path):
    doc = JsonDocument(tmp_path / "doc.json")
    await doc.write({"ok": True})
    with pytest.raises(TypeError):
        await doc.write({"bad": object()})
    assert await doc.read() == {"ok": True}
