"""
growth-autopilot: unit tests for file helpers and the TTL cache

File: tests/unit/utils/test_fs_and_cache.py
Last updated: 2026-10-19
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from growth_autopilot.errors import DependencyError, ValidationError
from growth_autopilot.utils.cache import DeterministicCache, file_cache_key
from growth_autopilot.utils.fs import atomic_write, read_json_file

if TYPE_CHECKING:
    from pathlib import Path


class _ManualClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.unit
def test_atomic_write_creates_parents_and_leaves_no_temp_files(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "out.json"

    atomic_write(target, '{"ok": true}')

    assert target.read_text(encoding="utf-8") == '{"ok": true}'
    assert [path.name for path in target.parent.iterdir()] == ["out.json"]


@pytest.mark.unit
def test_read_json_file_missing_is_dependency_error(tmp_path: Path) -> None:
    with pytest.raises(DependencyError):
        read_json_file(tmp_path / "absent.json", label="inputs file")


@pytest.mark.unit
def test_read_json_file_malformed_is_validation_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValidationError):
        read_json_file(path, label="inputs file")


@pytest.mark.unit
def test_cache_entries_expire_after_ttl() -> None:
    clock = _ManualClock()
    cache: DeterministicCache[str] = DeterministicCache(10, clock=clock)
    cache.set("k", "v")

    clock.now = 10.0
    assert cache.get("k") == "v"
    clock.now = 10.5
    assert cache.get("k") is None
    assert cache.size == 0


@pytest.mark.unit
def test_get_or_compute_only_computes_on_miss() -> None:
    cache: DeterministicCache[int] = DeterministicCache(60, clock=_ManualClock())
    calls: list[int] = []

    def compute() -> int:
        calls.append(1)
        return 42

    assert cache.get_or_compute("answer", compute) == 42
    assert cache.get_or_compute("answer", compute) == 42
    assert len(calls) == 1


@pytest.mark.unit
def test_file_cache_key_tracks_mtime_and_size() -> None:
    assert file_cache_key("/p", 1.0, 10) != file_cache_key("/p", 2.0, 10)
    assert file_cache_key("/p", 1.0, 10) != file_cache_key("/p", 1.0, 11)


@pytest.mark.unit
def test_read_json_file_invalid_utf8_is_validation_error(tmp_path: Path) -> None:
    path = tmp_path / "inputs.json"
    path.write_bytes(b'{"content_draft": "\xff\xfe"}')

    with pytest.raises(ValidationError) as excinfo:
        read_json_file(path, label="inputs file")

    assert "invalid UTF-8 in inputs file" in str(excinfo.value)
    assert [issue.path for issue in excinfo.value.issues] == [""]
    assert excinfo.value.issues[0].message.startswith("invalid UTF-8:")
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


@pytest.mark.unit
def test_set_purges_entries_for_stale_keys() -> None:
    clock = _ManualClock()
    cache: DeterministicCache[str] = DeterministicCache(10, clock=clock)
    cache.set(file_cache_key("/p/base.yaml", 1.0, 10), "old")

    clock.now = 11.0
    cache.set(file_cache_key("/p/base.yaml", 2.0, 12), "new")

    assert list(cache._entries) == ["/p/base.yaml:2.0:12"]
