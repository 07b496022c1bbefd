"""Job record store with pluggable Redis / in-memory backends.

The in-memory backend is the default: job records live only as long as the
server process. Deployments with more than one replica, or that need job
status to survive a restart, switch to Redis via
``TRPA_JOB_STORE__BACKEND=redis``.

Usage::

    from ticket_rpa.store.job_store import build_job_store

    store = build_job_store()
    store.save(job)
    job = store.load(job.id)
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any

from ticket_rpa.exceptions import JobNotFoundError
from ticket_rpa.models.job import JobRecord

logger = logging.getLogger(__name__)


class JobStore:
    """Abstract-ish job store interface implemented by both backends."""

    def get(self, job_id: str) -> dict[str, Any] | None:
        """Return the raw job dict or ``None`` if unknown."""
        raise NotImplementedError

    def set(self, job_id: str, data: dict[str, Any], *, ttl_seconds: int = 0) -> None:
        """Create or replace the job entry.

        Args:
            job_id: Unique job identifier.
            data: JSON-serialisable dict.
            ttl_seconds: Optional time-to-live in seconds (0 = backend default).
        """
        raise NotImplementedError

    def update(self, job_id: str, **fields: Any) -> None:
        """Merge *fields* into an existing job entry.

        Creates the entry if it does not exist.
        """
        existing = self.get(job_id) or {}
        existing.update(fields)
        self.set(job_id, existing)

    def delete(self, job_id: str) -> None:
        """Remove a job entry."""
        raise NotImplementedError

    def exists(self, job_id: str) -> bool:
        """Return True if the job exists."""
        return self.get(job_id) is not None

    def save(self, job: JobRecord) -> None:
        """Persist a ``JobRecord``."""
        self.set(job.id, job.model_dump(mode="json"))

    def load(self, job_id: str) -> JobRecord:
        """Return the ``JobRecord`` for *job_id*.

        Raises:
            JobNotFoundError: If the id is unknown (or expired).
        """
        data = self.get(job_id)
        if data is None:
            raise JobNotFoundError(job_id)
        return JobRecord.model_validate(data)


class InMemoryJobStore(JobStore):
    """In-memory job store; the default for single-process deployments."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, job_id: str) -> dict[str, Any] | None:
        """Return a copy of the job dict or ``None``."""
        with self._lock:
            data = self._data.get(job_id)
            return dict(data) if data is not None else None

    def set(self, job_id: str, data: dict[str, Any], *, ttl_seconds: int = 0) -> None:
        """Store the job data (TTL ignored in-memory)."""
        with self._lock:
            self._data[job_id] = dict(data)

    def delete(self, job_id: str) -> None:
        """Remove a job entry."""
        with self._lock:
            self._data.pop(job_id, None)

    def clear(self) -> None:
        """Drop every job entry."""
        with self._lock:
            self._data.clear()


class RedisJobStore(JobStore):
    """Redis-backed job store.

    Keys are stored under a configurable prefix (default ``trpa:job:``)
    with a TTL so finished jobs expire automatically.

    Args:
        redis_url: Redis connection string (e.g. ``redis://localhost:6379/0``).
        prefix: Key prefix for all job entries.
        default_ttl: Default TTL in seconds (0 = no expiry).
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "trpa:job:",
        default_ttl: int = 86400,
    ) -> None:
        try:
            import redis as redis_lib
        except ImportError as exc:
            raise ImportError(
                "Redis support requires the 'redis' package. "
                "Install it with: pip install 'ticket-rpa[redis]'"
            ) from exc

        self._client = redis_lib.Redis.from_url(redis_url, decode_responses=True)
        self._prefix = prefix
        self._default_ttl = default_ttl

    def _key(self, job_id: str) -> str:
        return f"{self._prefix}{job_id}"

    def get(self, job_id: str) -> dict[str, Any] | None:
        """Return the job dict from Redis or ``None``."""
        raw = self._client.get(self._key(job_id))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, job_id: str, data: dict[str, Any], *, ttl_seconds: int = 0) -> None:
        """Store job data in Redis with optional TTL."""
        effective_ttl = ttl_seconds or self._default_ttl
        key = self._key(job_id)
        payload = json.dumps(data, default=str)
        if effective_ttl > 0:
            self._client.setex(key, effective_ttl, payload)
        else:
            self._client.set(key, payload)

    def delete(self, job_id: str) -> None:
        """Remove job from Redis."""
        self._client.delete(self._key(job_id))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_singleton: JobStore | None = None


def build_job_store(*, force_new: bool = False) -> JobStore:
    """Return a job store matching the current settings.

    The instance is cached as a module singleton so the API routes and the
    background runner share the same store (required for the in-memory
    backend).

    Args:
        force_new: Bypass the singleton cache and create a fresh instance.
    """
    global _singleton  # noqa: PLW0603
    if _singleton is not None and not force_new:
        return _singleton

    from ticket_rpa.settings import get_settings

    cfg = get_settings().job_store

    if cfg.backend == "redis":
        logger.info(
            "Using Redis job store at %s (prefix=%s, ttl=%d)",
            cfg.redis_url,
            cfg.key_prefix,
            cfg.default_ttl_seconds,
        )
        _singleton = RedisJobStore(
            redis_url=cfg.redis_url,
            prefix=cfg.key_prefix,
            default_ttl=cfg.default_ttl_seconds,
        )
    else:
        logger.info("Using in-memory job store")
        _singleton = InMemoryJobStore()

    return _singleton
