"""Tests for the scan result cache store."""

from __future__ import annotations

import json
from pathlib import Path

from javadep.models import ScanResult
from javadep.stores import ScanCache, cache_key


def test_cache_key_joins_location_and_resource() -> None:
    assert cache_key("file:///lib/a.jar", "demo/A.class") == "file:///lib/a.jar!/demo/A.class"


def test_scan_cache_round_trip(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache.json"
    cache = ScanCache(cache_path)
    result = ScanResult(references=frozenset({"demo.B", "demo.C"}))
    cache.store("file:///a.jar!/demo/A.class", signature="decl=1;code=1", fingerprint="10:20", result=result)
    cache.persist()

    loaded = ScanCache(cache_path)
    reuse = loaded.get("file:///a.jar!/demo/A.class", signature="decl=1;code=1", fingerprint="10:20")

    assert reuse == result
    assert len(loaded) == 1


def test_scan_cache_keeps_scan_errors(tmp_path: Path) -> None:
    cache = ScanCache(tmp_path / "cache.json")
    result = ScanResult(references=frozenset({"demo.B"}), error="Truncated class file")
    cache.store("k", signature="s", fingerprint="fp", result=result)
    cache.persist()

    assert ScanCache(tmp_path / "cache.json").get("k", signature="s", fingerprint="fp") == result


def test_scan_cache_invalidates_on_signature_or_fingerprint_change(tmp_path: Path) -> None:
    cache = ScanCache(tmp_path / "cache.json")
    cache.store("k", signature="sig-1", fingerprint="fp", result=ScanResult())

    assert cache.get("k", signature="sig-1", fingerprint="fp") is not None
    assert cache.get("k", signature="sig-2", fingerprint="fp") is None
    assert cache.get("k", signature="sig-1", fingerprint="fp-changed") is None
    assert cache.get("other", signature="sig-1", fingerprint="fp") is None


def test_persist_is_skipped_when_nothing_changed(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache.json"

    ScanCache(cache_path).persist()

    assert not cache_path.exists()


def test_unreadable_or_outdated_cache_is_ignored(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache.json"
    cache_path.write_text("{not json", encoding="utf-8")
    assert len(ScanCache(cache_path)) == 0

    cache_path.write_text(json.dumps({"version": 0, "entries": {"k": {}}}), encoding="utf-8")
    assert len(ScanCache(cache_path)) == 0

    cache_path.write_text(
        json.dumps(
            {
                "version": 1,
                "entries": {
                    "good": {"signature": "s", "fingerprint": "f", "references": ["a.B"]},
                    "partial": {"signature": "s"},
                },
            }
        ),
        encoding="utf-8",
    )
    cache = ScanCache(cache_path)
    assert len(cache) == 1
    assert cache.get("good", signature="s", fingerprint="f") == ScanResult(references=frozenset({"a.B"}))
