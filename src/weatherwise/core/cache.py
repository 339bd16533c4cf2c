"""
On-disk JSON cache shared by the ingestion clients.

Entries live under `<base_dir>/<namespace>/<sha256>.json` as a small envelope
(`created_at_unix`, `ttl_seconds`, `value`). Freshness is decided at read time, so the
same entry can be read as fresh by `get` and as a fallback by `get_stale` once the
upstream provider stops answering.

Namespaces in use:
- `climate`: one multi-decade POWER parameter block per (lat, lon, year range),
  shared by the target date and its four alternatives;
- `holidays`: one record list per (country, year), written with `merge_records`.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable


@dataclass(frozen=True)
class CacheEntry:
    created_at_unix: int
    ttl_seconds: int
    value: Any

    def is_fresh(self, now_unix: int, ttl_seconds: int | None = None) -> bool:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        return now_unix - self.created_at_unix <= ttl

    def to_json(self) -> str:
        return json.dumps(
            {"created_at_unix": self.created_at_unix, "ttl_seconds": self.ttl_seconds, "value": self.value},
            ensure_ascii=False,
        )


class FileCache:
    """A filesystem-backed cache keyed by (namespace, key)."""

    def __init__(self, base_dir: Path, enabled: bool = True, default_ttl_seconds: int = 86400):
        self._base_dir = base_dir
        self._enabled = enabled
        self._default_ttl_seconds = default_ttl_seconds

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _path(self, namespace: str, key: str) -> Path:
        digest = sha256(f"{namespace}:{key}".encode("utf-8")).hexdigest()
        return self._base_dir / namespace / f"{digest}.json"

    def _load(self, namespace: str, key: str) -> CacheEntry | None:
        if not self._enabled:
            return None
        try:
            raw = json.loads(self._path(namespace, key).read_text(encoding="utf-8"))
            return CacheEntry(int(raw["created_at_unix"]), int(raw["ttl_seconds"]), raw["value"])
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError):
            # A corrupt or half-written file is a miss.
            return None

    def get(self, namespace: str, key: str, ttl_seconds: int | None = None) -> Any | None:
        """Return the value if present and fresh.

        `ttl_seconds` overrides the TTL stored with the entry, so a caller can tighten
        or relax freshness without rewriting the file.
        """
        entry = self._load(namespace, key)
        if entry is None or not entry.is_fresh(int(time.time()), ttl_seconds):
            return None
        return entry.value

    def get_stale(self, namespace: str, key: str) -> Any | None:
        """Return the value regardless of age (stale-if-error fallback)."""
        entry = self._load(namespace, key)
        return entry.value if entry is not None else None

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        if not self._enabled:
            return
        entry = CacheEntry(
            created_at_unix=int(time.time()),
            ttl_seconds=int(self._default_ttl_seconds if ttl_seconds is None else ttl_seconds),
            value=value,
        )
        path = self._path(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Unique temp name per writer, then an atomic rename over the target.
        tmp = path.with_name(f"{path.stem}.{time.monotonic_ns()}.tmp")
        tmp.write_text(entry.to_json(), encoding="utf-8")
        tmp.replace(path)

    def merge_records(
        self,
        namespace: str,
        key: str,
        records: list[dict[str, Any]],
        *,
        identity: Callable[[dict[str, Any]], str],
        ttl_seconds: int | None = None,
    ) -> list[dict[str, Any]]:
        """Upsert `records` into the list stored under `key` and return the merged list.

        Records are matched by `identity(record)`; incoming fields overwrite stored ones.
        The stored list is ordered by identity, so writers that apply the same records in
        a different order end with the same entry.
        """
        if not self._enabled:
            return list(records)

        merged: dict[str, dict[str, Any]] = {}
        stored = self.get_stale(namespace, key)
        for rec in stored if isinstance(stored, list) else []:
            if isinstance(rec, dict):
                merged[identity(rec)] = dict(rec)
        for rec in records:
            rid = identity(rec)
            merged[rid] = {**merged.get(rid, {}), **rec}

        values = [merged[rid] for rid in sorted(merged)]
        self.set(namespace, key, values, ttl_seconds=ttl_seconds)
        return values
