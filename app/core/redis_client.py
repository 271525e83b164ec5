"""
Cliente Redis para locks distribuidos por cuenta.

Redis es opcional: sin REDIS_URL los locks de cuenta se resuelven dentro
del proceso (ver app.utils.account_lock).
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Global Redis client instance
_redis_client: Optional[redis.Redis] = None


def is_redis_configured() -> bool:
    return bool(get_settings().REDIS_URL)


def get_redis_client() -> redis.Redis:
    """
    Returns a Redis client instance.

    Returns:
        redis.Redis: Redis client instance

    Raises:
        RuntimeError: If Redis URL is not configured
    """
    global _redis_client

    settings = get_settings()
    if not settings.REDIS_URL:
        raise RuntimeError("Redis URL not configured")

    if _redis_client is None:
        # La conexión se establece en el primer comando
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
        logger.debug("Redis client instance created")

    return _redis_client


async def test_redis_connection() -> bool:
    """
    Verifica la conectividad con Redis.

    Returns:
        bool: True si la conexión es exitosa, False en caso contrario
    """
    if not is_redis_configured():
        logger.warning("Redis URL not configured")
        return False

    try:
        return bool(await get_redis_client().ping())
    except RedisError as e:
        logger.error(f"Redis connection test failed: {e}")
        return False


async def initialize_redis() -> bool:
    """
    Inicializa el cliente Redis si está configurado.

    Returns:
        bool: True si Redis quedó disponible
    """
    if not is_redis_configured():
        logger.info("Redis no configurado - locks de cuenta en proceso")
        return False

    available = await test_redis_connection()
    if available:
        logger.info("✅ Redis disponible para locks de cuenta")
    else:
        logger.warning("⚠️ Redis configurado pero no responde")
    return available


async def close_redis() -> None:
    """
    Cierra el cliente Redis.
    """
    global _redis_client

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("Redis client closed")
