import json
import time
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from cyberlearn.core.config import settings

logger = logging.getLogger(__name__)

SessionState = Dict[str, Any]


class SessionBackend(ABC):
    """Key/value storage for JSON-compatible session state with a per-key lifetime."""

    @abstractmethod
    async def read(self, key: str) -> Optional[SessionState]:
        pass

    @abstractmethod
    async def write(self, key: str, state: SessionState, ttl: int) -> bool:
        pass

    @abstractmethod
    async def remove(self, key: str) -> bool:
        pass

    @abstractmethod
    async def remove_prefix(self, prefix: str) -> int:
        pass


class MemorySessionBackend(SessionBackend):
    def __init__(self):
        self._entries: Dict[str, Tuple[SessionState, float]] = {}
        self._lock = asyncio.Lock()

    def _purge(self, now: float) -> None:
        for key in [k for k, (_, expires_at) in self._entries.items() if expires_at and now >= expires_at]:
            del self._entries[key]

    async def read(self, key: str) -> Optional[SessionState]:
        async with self._lock:
            self._purge(time.time())
            entry = self._entries.get(key)
            return entry[0] if entry else None

    async def write(self, key: str, state: SessionState, ttl: int) -> bool:
        async with self._lock:
            expires_at = time.time() + ttl if ttl > 0 else 0
            self._entries[key] = (state, expires_at)
            return True

    async def remove(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def remove_prefix(self, prefix: str) -> int:
        async with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for key in keys:
                del self._entries[key]
            return len(keys)


class RedisSessionBackend(SessionBackend):
    def __init__(self, redis_url: str):
        import redis.asyncio as redis
        self.redis = redis.from_url(redis_url, decode_responses=True)

    async def read(self, key: str) -> Optional[SessionState]:
        try:
            raw = await self.redis.get(key)
        except Exception as e:
            logger.error(f"Redis read failed for {key}: {e}")
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding unreadable session state at {key}")
            return None

    async def write(self, key: str, state: SessionState, ttl: int) -> bool:
        try:
            payload = json.dumps(state, default=str)
            if ttl > 0:
                await self.redis.setex(key, ttl, payload)
            else:
                await self.redis.set(key, payload)
            return True
        except Exception as e:
            logger.error(f"Redis write failed for {key}: {e}")
            return False

    async def remove(self, key: str) -> bool:
        try:
            return await self.redis.delete(key) > 0
        except Exception as e:
            logger.error(f"Redis delete failed for {key}: {e}")
            return False

    async def remove_prefix(self, prefix: str) -> int:
        removed = 0
        try:
            async for key in self.redis.scan_iter(match=f"{prefix}*"):
                removed += await self.redis.delete(key)
        except Exception as e:
            logger.error(f"Redis prefix delete failed for {prefix}: {e}")
        return removed


def create_session_backend() -> SessionBackend:
    if settings.REDIS_URL:
        logger.info("Storing quiz sessions in Redis")
        return RedisSessionBackend(settings.REDIS_URL)

    logger.info("Storing quiz sessions in process memory")
    return MemorySessionBackend()


class QuizSessionStore:
    """In-progress quiz sessions, kept between requests under ``quiz_session:{id}``."""

    prefix = "quiz_session:"

    def __init__(self, backend: SessionBackend, ttl: Optional[int] = None):
        self.backend = backend
        self.ttl = settings.QUIZ_SESSION_TTL if ttl is None else ttl

    def key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    async def load(self, session_id: str) -> Optional[SessionState]:
        return await self.backend.read(self.key(session_id))

    async def save(self, session_id: str, state: SessionState) -> bool:
        saved = await self.backend.write(self.key(session_id), state, self.ttl)
        if not saved:
            logger.warning(f"Quiz session {session_id} was not saved")
        return saved

    async def discard(self, session_id: str) -> bool:
        return await self.backend.remove(self.key(session_id))

    async def clear(self) -> int:
        return await self.backend.remove_prefix(self.prefix)


quiz_sessions = QuizSessionStore(create_session_backend())
