"""Tests for bounded transcript tail reads."""

import pytest

from fleetwatch.sessions.transcripts import TranscriptReader
from tests.conftest import write_transcript


class TestTranscriptPath:

    def test_resolves_jsonl(self, sessions_dir):
        reader = TranscriptReader(sessions_dir)
        assert reader.transcript_path("abc") == sessions_dir / "abc.jsonl"

    @pytest.mark.parametrize("session_id", ["", ".", "..", "../etc/passwd", "a/b", "a\\b"])
    def test_rejects_unsafe_ids(self, sessions_dir, session_id):
        assert TranscriptReader(sessions_dir).transcript_path(session_id) is None


class TestReadRecent:

    @pytest.mark.asyncio
    async def test_missing_transcript_is_empty(self, sessions_dir):
        assert await TranscriptReader(sessions_dir).read_recent("nope") == []

    @pytest.mark.asyncio
    async def test_unsafe_id_is_empty(self, sessions_dir):
        assert await TranscriptReader(sessions_dir).read_recent("../x") == []

    @pytest.mark.asyncio
    async def test_returns_tail_in_file_order(self, sessions_dir):
        write_transcript(sessions_dir, "s1", [f'{{"n": {i}}}' for i in range(10)])

        lines = await TranscriptReader(sessions_dir).read_recent("s1", limit=3)

        assert lines == ['{"n": 7}', '{"n": 8}', '{"n": 9}']

    @pytest.mark.asyncio
    async def test_blank_lines_not_counted(self, sessions_dir):
        write_transcript(sessions_dir, "s1", ['{"n": 1}', "", "   ", '{"n": 2}', ""])

        lines = await TranscriptReader(sessions_dir).read_recent("s1", limit=2)

        assert lines == ['{"n": 1}', '{"n": 2}']

    @pytest.mark.asyncio
    async def test_zero_limit(self, sessions_dir):
        write_transcript(sessions_dir, "s1", ['{"n": 1}'])
        assert await TranscriptReader(sessions_dir).read_recent("s1", limit=0) == []

    @pytest.mark.asyncio
    async def test_undecodable_bytes_stay_on_their_line(self, sessions_dir):
        (sessions_dir / "s1.jsonl").write_bytes(b"\xff\xfe not utf-8\n" + b'{"n": 2}\n')

        lines = await TranscriptReader(sessions_dir).read_recent("s1")

        assert len(lines) == 2
        assert lines[0].startswith("\ufffd")
        assert lines[1] == '{"n": 2}'
