from __future__ import annotations

import json
import logging
import time
from hashlib import sha256
from pathlib import Path
from typing import Any

from antlyst.config import CACHE_DIR, CACHE_TTL_SECONDS, REDIS_URL

try:
    import redis  # type: ignore
except ImportError:  # pragma: no cover
    redis = None

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Stores generated dashboard documents by key.

    Redis is used when a URL is configured and reachable; the JSON file store
    is always written so a restart without redis still finds earlier results.
    """

    def __init__(self, cache_dir: Path | None = None, redis_url: str | None = None) -> None:
        self.cache_dir = Path(cache_dir) if cache_dir is not None else CACHE_DIR
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._redis = None
        url = REDIS_URL if redis_url is None else redis_url
        if redis and url:
            try:
                self._redis = redis.Redis.from_url(url, decode_responses=True)
                self._redis.ping()
            except redis.RedisError as exc:
                logger.warning("Redis unavailable at %s, using file cache only: %s", url, exc)
                self._redis = None

    def _file_path(self, key: str) -> Path:
        safe = sha256(key.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{safe}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        if self._redis:
            value = self._redis.get(key)
            if value:
                return json.loads(value)
        path = self._file_path(key)
        if not path.exists():
            return None
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable cache entry %s", path.name)
            path.unlink(missing_ok=True)
            return None
        expires_at = entry.get("expires_at")
        if expires_at is not None and expires_at < time.time():
            path.unlink(missing_ok=True)
            return None
        return entry.get("value")

    def set(self, key: str, value: dict[str, Any], ttl_seconds: int = CACHE_TTL_SECONDS) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        if self._redis:
            self._redis.setex(key, ttl_seconds, payload)
        entry = {"key": key, "expires_at": time.time() + ttl_seconds, "value": value}
        path = self._file_path(key)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(entry, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(path)

    def invalidate_prefix(self, prefix: str) -> int:
        removed = 0
        if self._redis:
            for key in self._redis.scan_iter(match=f"{prefix}*"):
                self._redis.delete(key)
        for path in self.cache_dir.glob("*.json"):
            try:
                entry = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                path.unlink(missing_ok=True)
                continue
            if str(entry.get("key", "")).startswith(prefix):
                path.unlink(missing_ok=True)
                removed += 1
        return removed
