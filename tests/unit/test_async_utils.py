"""Tests for async storage helpers."""

from pathlib import Path

import pytest

from loadcompare.adapters.storage.async_utils import (
    iter_lines,
    list_json_files,
    stat_mtime_ns,
)

pytestmark = [
    pytest.mark.unit,
    pytest.mark.storage,
    pytest.mark.tier(1),
    pytest.mark.tra("Adapter.AsyncFile.Helpers"),
]


class TestIterLines:
    """Tests for iter_lines()."""

    async def test_yields_every_line_in_order(self, tmp_path: Path) -> None:
        path = tmp_path / "log.json"
        path.write_text("a\nb\n\nc", encoding="utf-8")

        lines = [line async for line in iter_lines(path)]

        assert lines == ["a\n", "b\n", "\n", "c"]

    async def test_small_batches_cover_whole_file(self, tmp_path: Path) -> None:
        """Batching bounds memory, not the number of lines returned."""
        path = tmp_path / "log.json"
        path.write_text("".join(f"line {i}\n" for i in range(500)), encoding="utf-8")

        lines = [line async for line in iter_lines(path, batch_bytes=64)]

        assert len(lines) == 500
        assert lines[-1] == "line 499\n"

    async def test_invalid_utf8_is_replaced(self, tmp_path: Path) -> None:
        path = tmp_path / "log.json"
        path.write_bytes(b"ok\n\xff\xfe\n")

        lines = [line async for line in iter_lines(path)]

        assert lines[0] == "ok\n"
        assert "�" in lines[1]

    async def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            async for _ in iter_lines(tmp_path / "missing.json"):
                pass


class TestFilesystemHelpers:
    async def test_stat_mtime_ns(self, tmp_path: Path) -> None:
        path = tmp_path / "log.json"
        path.write_text("", encoding="utf-8")

        assert await stat_mtime_ns(path) == path.stat().st_mtime_ns

    async def test_list_json_files_sorted(self, tmp_path: Path) -> None:
        for name in ("b.json", "a.json", "c.txt"):
            (tmp_path / name).write_text("", encoding="utf-8")

        assert await list_json_files(tmp_path) == ["a.json", "b.json"]

    async def test_list_json_files_missing_directory(self, tmp_path: Path) -> None:
        assert await list_json_files(tmp_path / "nope") == []
