"""Persistent cache for per-class scan results."""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Dict, Optional

from ..models import ScanResult

_CACHE_VERSION = 1


def cache_key(location: str, resource: str) -> str:
    """Key a class file by the archive holding it and its path inside that archive."""
    return f"{location}!/{resource}"


class ScanCache:
    """Stores scanned references keyed by class location and archive fingerprint."""

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        if self._path is not None:
            self._load(self._path)

    def __len__(self) -> int:
        return len(self._entries)

    def get(
        self, key: str, *, signature: str, fingerprint: str
    ) -> Optional[ScanResult]:
        entry = self._entries.get(key)
        if not entry:
            return None
        if entry.get("signature") != signature:
            return None
        if entry.get("fingerprint") != fingerprint:
            return None
        references = entry.get("references")
        if not isinstance(references, list):
            return None
        error = entry.get("error")
        return ScanResult(
            references=frozenset(str(name) for name in references if isinstance(name, str)),
            error=error if isinstance(error, str) else None,
        )

    def store(
        self,
        key: str,
        *,
        signature: str,
        fingerprint: str,
        result: ScanResult,
    ) -> None:
        self._entries[key] = {
            "signature": signature,
            "fingerprint": fingerprint,
            "references": sorted(result.references),
            "error": result.error,
            "updated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        self._dirty = True

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {
            "version": _CACHE_VERSION,
            "entries": self._entries,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
        )
        self._dirty = False

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        valid_entries: Dict[str, Dict[str, object]] = {}
        for key, raw in entries.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            if (
                "signature" not in raw
                or "fingerprint" not in raw
                or "references" not in raw
            ):
                continue
            valid_entries[key] = raw
        self._entries = valid_entries
        self._dirty = False


__all__ = ["ScanCache", "cache_key"]
