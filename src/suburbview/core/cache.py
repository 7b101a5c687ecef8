from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable

"""
On-disk JSON cache for upstream responses.

Position readings arrive many times per second and every one of them asks for a
fresh area catalog. Consecutive readings from a device standing still produce the
same bounding box, so the Overpass client keys responses by query text and serves
repeats from here instead of the network.

- Keys are hashed (SHA-256) to avoid filesystem path issues.
- TTL is enforced on read; an expired entry is a miss.
- Superseded refreshes keep running in worker threads, so one key can be written
  by several threads at once; each write goes through its own temp file.
"""

logger = logging.getLogger(__name__)


class FileCache:
    """A filesystem-backed cache keyed by (namespace, key)."""

    def __init__(self, base_dir: Path, enabled: bool = True, default_ttl_seconds: int = 600):
        self._base_dir = base_dir
        self._enabled = enabled
        self._default_ttl_seconds = default_ttl_seconds

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _key_path(self, namespace: str, key: str) -> Path:
        digest = sha256(f"{namespace}:{key}".encode("utf-8")).hexdigest()
        return self._base_dir / namespace / f"{digest}.json"

    def get(self, namespace: str, key: str, ttl_seconds: int | None = None) -> Any | None:
        """Read a cached value if present and not expired; otherwise return None."""
        if not self._enabled:
            return None
        path = self._key_path(namespace, key)
        if not path.exists():
            return None

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            created = int(raw["created_at_unix"])
            stored_ttl = int(raw["ttl_seconds"])
            value = raw["value"]
        except (OSError, ValueError, KeyError, TypeError):
            logger.debug("Ignoring unreadable cache entry %s", path)
            return None

        effective_ttl = ttl_seconds if ttl_seconds is not None else stored_ttl
        if int(time.time()) - created > effective_ttl:
            return None
        return value

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Write a JSON-serializable value to disk (private temp file + atomic replace)."""
        if not self._enabled:
            return None

        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl_seconds
        path = self._key_path(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            "created_at_unix": int(time.time()),
            "ttl_seconds": int(ttl),
            "value": value,
        }
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=path.stem, suffix=".tmp", delete=False
        ) as tmp:
            tmp.write(json.dumps(payload, ensure_ascii=False))
        try:
            os.replace(tmp.name, path)
        except OSError:
            os.unlink(tmp.name)
            raise

    def get_or_set(
        self,
        namespace: str,
        key: str,
        builder: Callable[[], Any],
        ttl_seconds: int | None = None,
    ) -> Any:
        """Return cached value, or compute/store it via `builder`.

        Exceptions from `builder()` propagate; nothing is written for them.
        """
        cached = self.get(namespace, key, ttl_seconds=ttl_seconds)
        if cached is not None:
            return cached
        value = builder()
        self.set(namespace, key, value, ttl_seconds=ttl_seconds)
        return value
