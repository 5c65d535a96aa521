"""
Storage layer for pastes: Redis in production, with an in-memory store for
development and testing (when Redis is unavailable).
Handles paste creation, atomic fetch-and-decrement and health checks.
"""
import logging
import math
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

from redis import Redis
from redis.exceptions import RedisError, WatchError

from pastebin.config import Settings
from pastebin.errors import ContentionError, PasteExistsError, PersistenceError
from pastebin.models import Paste

logger = logging.getLogger(__name__)


class PasteStore(ABC):
    """Interface shared by the storage backends."""

    @abstractmethod
    def create_paste(
        self,
        paste_id: str,
        content: str,
        expires_at: Optional[datetime] = None,
        remaining_views: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> Paste:
        ...

    @abstractmethod
    def fetch_and_decrement(self, paste_id: str, now: datetime) -> Optional[Paste]:
        ...

    @abstractmethod
    def check_health(self) -> bool:
        ...

    def close(self) -> None:
        pass


class InMemoryPasteStore(PasteStore):
    """Simple in-memory store for development/testing (when Redis unavailable)."""

    def __init__(self, max_retries: int = 100):
        self.max_retries = max_retries
        self.pastes: Dict[str, Paste] = {}
        self._lock = threading.Lock()

    def create_paste(
        self,
        paste_id: str,
        content: str,
        expires_at: Optional[datetime] = None,
        remaining_views: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> Paste:
        paste = Paste(
            id=paste_id,
            content=content,
            expires_at=expires_at,
            remaining_views=remaining_views,
        )
        with self._lock:
            if paste_id in self.pastes:
                raise PasteExistsError(f"Paste {paste_id} already exists")
            self.pastes[paste_id] = paste
        return paste

    def _compare_and_set(self, expected: Paste, updated: Paste) -> bool:
        """Store `updated` only if the stored view count still matches `expected`."""
        with self._lock:
            current = self.pastes.get(expected.id)
            if current is None or current.remaining_views != expected.remaining_views:
                return False
            self.pastes[expected.id] = updated
            return True

    def fetch_and_decrement(self, paste_id: str, now: datetime) -> Optional[Paste]:
        for attempt in range(self.max_retries):
            paste = self.pastes.get(paste_id)
            if paste is None or not paste.is_available(now):
                return None
            if paste.remaining_views is None:
                return paste

            updated = paste.consume_view()
            if self._compare_and_set(paste, updated):
                return updated
            logger.debug(f"View count for paste {paste_id} changed concurrently, retrying ({attempt + 1})")

        raise ContentionError(f"Gave up decrementing views for paste {paste_id}")

    def check_health(self) -> bool:
        """Health check."""
        return True


class RedisPasteStore(PasteStore):
    """Pastes stored as Redis hashes at paste:{id}."""

    def __init__(self, redis: Redis, max_retries: int = 100, key_expiry_grace_seconds: int = 60):
        self.redis = redis
        self.max_retries = max_retries
        self.key_expiry_grace_seconds = key_expiry_grace_seconds

    @staticmethod
    def _key(paste_id: str) -> str:
        return f"paste:{paste_id}"

    @staticmethod
    def _to_hash(paste: Paste, created_at: datetime) -> Dict[str, str]:
        return {
            "content": paste.content,
            "created_at": created_at.isoformat(),
            "expires_at": paste.expires_at.isoformat() if paste.expires_at else "",
            "remaining_views": "" if paste.remaining_views is None else str(paste.remaining_views),
        }

    @staticmethod
    def _from_hash(paste_id: str, data: Dict[str, str]) -> Paste:
        expires_at = None
        if data.get("expires_at"):
            expires_at = datetime.fromisoformat(data["expires_at"])
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)

        remaining_views = None
        if data.get("remaining_views", "") != "":
            remaining_views = int(data["remaining_views"])

        return Paste(
            id=paste_id,
            content=data.get("content", ""),
            expires_at=expires_at,
            remaining_views=remaining_views,
        )

    def create_paste(
        self,
        paste_id: str,
        content: str,
        expires_at: Optional[datetime] = None,
        remaining_views: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> Paste:
        """
        Save a paste, refusing to overwrite an existing id.

        Args:
            paste_id: Unique paste identifier
            content: Text content of the paste
            expires_at: Optional absolute expiry time
            remaining_views: Optional view limit
            created_at: Creation time on the same clock as expires_at

        Returns:
            The stored paste

        Raises:
            PasteExistsError: If the id is already taken
            PersistenceError: If Redis cannot be reached
        """
        key = self._key(paste_id)
        paste = Paste(
            id=paste_id,
            content=content,
            expires_at=expires_at,
            remaining_views=remaining_views,
        )
        created_at = created_at or datetime.now(timezone.utc)

        try:
            with self.redis.pipeline() as pipe:
                pipe.watch(key)
                if pipe.exists(key):
                    raise PasteExistsError(f"Paste {paste_id} already exists")

                pipe.multi()
                pipe.hset(key, mapping=self._to_hash(paste, created_at))
                if expires_at is not None:
                    # Garbage collection only; availability is decided against the caller's clock
                    ttl_seconds = max(math.ceil((expires_at - created_at).total_seconds()), 0)
                    pipe.expire(key, ttl_seconds + self.key_expiry_grace_seconds)
                pipe.execute()
        except WatchError as e:
            raise PasteExistsError(f"Paste {paste_id} was written concurrently") from e
        except RedisError as e:
            raise PersistenceError(f"Error saving paste {paste_id}: {e}") from e

        logger.info(f"Paste {paste_id} saved successfully")
        return paste

    def fetch_and_decrement(self, paste_id: str, now: datetime) -> Optional[Paste]:
        """
        Fetch a paste and consume one view, atomically.

        The view counter is decremented inside a WATCH/MULTI transaction; if
        another reader changes the hash first the whole read is retried.

        Args:
            paste_id: Unique paste identifier
            now: Time to compare the expiry against

        Returns:
            The paste as seen after this view, or None if not found/unavailable
        """
        key = self._key(paste_id)

        try:
            for attempt in range(self.max_retries):
                with self.redis.pipeline() as pipe:
                    try:
                        pipe.watch(key)
                        data = pipe.hgetall(key)
                        if not data:
                            logger.info(f"Paste {paste_id} not found")
                            return None

                        paste = self._from_hash(paste_id, data)
                        if not paste.is_available(now):
                            logger.info(f"Paste {paste_id} is expired or out of views")
                            return None

                        if paste.remaining_views is None:
                            return paste

                        updated = paste.consume_view()
                        pipe.multi()
                        pipe.hset(key, "remaining_views", str(updated.remaining_views))
                        pipe.execute()
                        return updated
                    except WatchError:
                        logger.debug(f"View count for paste {paste_id} changed concurrently, retrying ({attempt + 1})")
        except RedisError as e:
            raise PersistenceError(f"Error fetching paste {paste_id}: {e}") from e

        raise ContentionError(f"Gave up decrementing views for paste {paste_id}")

    def check_health(self) -> bool:
        """Check if database connection is alive."""
        try:
            self.redis.ping()
            return True
        except Exception as e:
            logger.error(f"Health check failed: {e}")
        return False

    def close(self) -> None:
        self.redis.close()


def build_store(settings: Settings) -> PasteStore:
    """Initialize the configured store, falling back to memory if allowed."""
    if settings.uses_memory_store:
        logger.warning("Using in-memory store. Data will NOT persist across restarts.")
        return InMemoryPasteStore(max_retries=settings.MAX_DECREMENT_RETRIES)

    logger.info(f"Attempting to connect to Redis: {settings.REDIS_URL[:30]}...")
    store = RedisPasteStore(
        Redis.from_url(settings.REDIS_URL, decode_responses=True),
        max_retries=settings.MAX_DECREMENT_RETRIES,
        key_expiry_grace_seconds=settings.KEY_EXPIRY_GRACE_SECONDS,
    )
    # Test connection
    if store.check_health():
        logger.info("Redis connected successfully")
        return store

    if settings.MEMORY_FALLBACK:
        logger.warning("Using in-memory fallback for development. Data will NOT persist across restarts.")
        store.close()
        return InMemoryPasteStore(max_retries=settings.MAX_DECREMENT_RETRIES)

    logger.error("Redis is unreachable; health checks will report unavailable until it recovers")
    return store
