"""
Game persistence.

Stores generated games keyed by game id, plus a per-topic counter of how
often each topic was requested. Redis in production, a dict in memory for
development and tests.
"""

import logging
from typing import Dict, Optional, Protocol

from redis import ConnectionPool, Redis, RedisError

from quizgen.core.config import Settings, settings as default_settings
from quizgen.core.exceptions import StorageError
from quizgen.schemas import Game

logger = logging.getLogger(__name__)

GAME_KEY_PREFIX = "game:"
TOPIC_COUNT_KEY = "topic_count"


class GameStore(Protocol):
    def save_game(self, game: Game) -> None:
        ...

    def get_game(self, game_id: str) -> Optional[Game]:
        ...

    def increment_topic(self, topic: str) -> int:
        ...

    def get_topic_counts(self) -> Dict[str, int]:
        ...


class InMemoryGameStore:
    """Process-local store. Contents are lost on restart."""

    def __init__(self):
        self._games: Dict[str, Game] = {}
        self._topic_counts: Dict[str, int] = {}

    def save_game(self, game: Game) -> None:
        self._games[game.id] = game.model_copy(deep=True)

    def get_game(self, game_id: str) -> Optional[Game]:
        game = self._games.get(game_id)
        return game.model_copy(deep=True) if game else None

    def increment_topic(self, topic: str) -> int:
        self._topic_counts[topic] = self._topic_counts.get(topic, 0) + 1
        return self._topic_counts[topic]

    def get_topic_counts(self) -> Dict[str, int]:
        return dict(self._topic_counts)


class RedisGameStore:
    """
    Redis-backed game store.

    Games are stored as JSON strings under ``game:<id>`` with a TTL;
    topic counts live in a single hash.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        ttl_seconds: Optional[int] = None,
        max_connections: int = 50,
        socket_timeout: int = 5,
        client: Optional[Redis] = None
    ):
        self.ttl_seconds = ttl_seconds

        if client is not None:
            self.client = client
        else:
            pool = ConnectionPool.from_url(
                redis_url,
                max_connections=max_connections,
                socket_timeout=socket_timeout,
                socket_connect_timeout=socket_timeout,
                decode_responses=True
            )
            self.client = Redis(connection_pool=pool)

        logger.info("✅ RedisGameStore initialized")

    def save_game(self, game: Game) -> None:
        key = f"{GAME_KEY_PREFIX}{game.id}"
        data = game.model_dump_json()
        try:
            if self.ttl_seconds:
                self.client.setex(key, self.ttl_seconds, data)
            else:
                self.client.set(key, data)
        except RedisError as e:
            logger.error(f"Redis set error for {key}: {e}")
            raise StorageError(f"Failed to save game {game.id}: {e}") from e

    def get_game(self, game_id: str) -> Optional[Game]:
        key = f"{GAME_KEY_PREFIX}{game_id}"
        try:
            data = self.client.get(key)
        except RedisError as e:
            logger.error(f"Redis get error for {key}: {e}")
            raise StorageError(f"Failed to load game {game_id}: {e}") from e

        if not data:
            return None
        return Game.model_validate_json(data)

    def increment_topic(self, topic: str) -> int:
        try:
            return int(self.client.hincrby(TOPIC_COUNT_KEY, topic, 1))
        except RedisError as e:
            logger.error(f"Redis hincrby error for topic {topic!r}: {e}")
            raise StorageError(f"Failed to update topic count: {e}") from e

    def get_topic_counts(self) -> Dict[str, int]:
        try:
            raw = self.client.hgetall(TOPIC_COUNT_KEY)
        except RedisError as e:
            logger.error(f"Redis hgetall error: {e}")
            raise StorageError(f"Failed to read topic counts: {e}") from e
        return {topic: int(count) for topic, count in raw.items()}

    def health_check(self) -> Dict[str, object]:
        try:
            self.client.ping()
            return {"status": "healthy", "backend": "redis", "connected": True}
        except RedisError as e:
            return {"status": "unhealthy", "backend": "redis", "error": str(e), "connected": False}


def create_game_store(config: Optional[Settings] = None) -> GameStore:
    """Build the store selected by QUIZ_STORE."""
    config = config or default_settings

    if config.QUIZ_STORE == "memory":
        logger.info("Using in-memory game store")
        return InMemoryGameStore()

    return RedisGameStore(redis_url=config.REDIS_URL, ttl_seconds=config.GAME_TTL_SECONDS)
