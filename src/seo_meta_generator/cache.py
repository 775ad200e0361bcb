"""
Response cache for generated meta payloads.

The service talks to a CacheBackend; concrete backends are:
- MemoryCache: in-process dict with expiry (default)
- RedisCache: shared cache via redis-py, JSON-serialized values
- NullCache: disables caching

Backend failures never reach callers: reads degrade to a miss and writes to
a no-op, with a warning logged.
"""

import hashlib
import json
import logging
import threading
import time
from typing import Optional, Protocol

import redis

from .config import ServiceSettings

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60 * 24

KEYWORD_PREFIX = "meta"
URL_PREFIX = "urlmeta"


class CacheBackend(Protocol):
    """Key/value store for JSON-compatible payloads."""

    def get(self, key: str) -> Optional[dict]:
        ...

    def set(self, key: str, value: dict, ttl: int = DEFAULT_TTL_SECONDS) -> None:
        ...


def cache_key(prefix: str, *parts: Optional[str]) -> str:
    """
    Build a cache key: SHA-1 of "<prefix>:<part1>::<part2>...".

    Examples:
        >>> cache_key("meta", "seo tool", "") == cache_key("meta", "seo tool", None)
        True
    """
    joined = "::".join(part or "" for part in parts)
    return hashlib.sha1(f"{prefix}:{joined}".encode("utf-8")).hexdigest()


class NullCache:
    """Cache that stores nothing."""

    def get(self, key: str) -> Optional[dict]:
        return None

    def set(self, key: str, value: dict, ttl: int = DEFAULT_TTL_SECONDS) -> None:
        return None


class MemoryCache:
    """
    In-process cache with per-entry expiry.

    Entries expire on read. Safe to share between request threads.
    """

    def __init__(self, max_entries: int = 1024):
        self.max_entries = max_entries
        self._entries: dict[str, tuple[float, dict]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Optional[dict]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= time.monotonic():
                del self._entries[key]
                return None
            return json.loads(json.dumps(value))

    def set(self, key: str, value: dict, ttl: int = DEFAULT_TTL_SECONDS) -> None:
        if ttl <= 0:
            return
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._evict()
            self._entries[key] = (time.monotonic() + ttl, json.loads(json.dumps(value)))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _evict(self) -> None:
        """Drop expired entries, then the one closest to expiry if still full."""
        now = time.monotonic()
        for key in [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]:
            del self._entries[key]
        if len(self._entries) >= self.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k][0])
            del self._entries[oldest]


class RedisCache:
    """Cache stored in Redis with native key expiry."""

    def __init__(self, redis_url: str, client: Optional["redis.Redis"] = None):
        self.redis_url = redis_url
        self._client = client

    @property
    def client(self) -> "redis.Redis":
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        return self._client

    def get(self, key: str) -> Optional[dict]:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache read error: {e}")
            return None
        if not value:
            return None
        try:
            data = json.loads(value)
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e}")
            return None
        return data if isinstance(data, dict) else None

    def set(self, key: str, value: dict, ttl: int = DEFAULT_TTL_SECONDS) -> None:
        if ttl <= 0:
            return
        try:
            self.client.set(key, json.dumps(value), ex=ttl)
        except redis.RedisError as e:
            logger.warning(f"Cache write error: {e}")


def create_cache(settings: Optional[ServiceSettings] = None) -> CacheBackend:
    """Redis when REDIS_URL is configured, otherwise an in-process cache."""
    settings = settings or ServiceSettings.from_env()
    if settings.redis_url:
        logger.info("Using Redis response cache")
        return RedisCache(settings.redis_url)
    return MemoryCache()
