"""
Sistema de health checks para monitoreo de servicios.

Verifica la base de datos del libro de cuentas y, si está configurado,
el Redis usado para los bloqueos de cuenta.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict

from app.core.redis_client import is_redis_configured, test_redis_connection
from app.db.connection import ConnDB

logger = logging.getLogger(__name__)

HEALTH_CHECK_TIMEOUT_SECONDS = 5.0

# Variable global para tracking de uptime
_app_start_time = datetime.now(timezone.utc)


async def get_health_status(conn_db: ConnDB) -> Dict[str, Any]:
    """
    Obtiene el estado de salud de los servicios.

    La base de datos es crítica; Redis solo se informa si está configurado
    y su caída no marca la aplicación como no saludable, porque los
    bloqueos pasan a ser locales.

    Args:
        conn_db: Conexión a base de datos a verificar

    Returns:
        Dict: Estado general, detalle por servicio y uptime
    """
    services = {
        "database": await run_health_check_with_timeout(
            "database", lambda: check_database_health(conn_db), HEALTH_CHECK_TIMEOUT_SECONDS
        )
    }
    if is_redis_configured():
        services["redis"] = await run_health_check_with_timeout(
            "redis", check_redis_health, HEALTH_CHECK_TIMEOUT_SECONDS
        )

    return {
        "overall": services["database"]["status"] == "healthy",
        "services": services,
        "uptime": get_uptime_info(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def run_health_check_with_timeout(
    service_name: str, check_func: Callable[[], Awaitable[bool]], timeout: float
) -> Dict[str, Any]:
    """
    Ejecuta una verificación de salud individual con timeout específico.

    Args:
        service_name: Nombre del servicio
        check_func: Función de verificación
        timeout: Timeout en segundos

    Returns:
        Dict: Resultado de la verificación
    """
    start_time = time.time()

    try:
        result = await asyncio.wait_for(check_func(), timeout=timeout)
        latency_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy" if result else "unhealthy",
            "latency_ms": round(latency_ms, 2),
        }

    except asyncio.TimeoutError:
        latency_ms = (time.time() - start_time) * 1000
        logger.warning(f"Health check timeout for {service_name} after {timeout}s")

        return {
            "status": "timeout",
            "error": f"Health check timeout after {timeout}s",
            "latency_ms": round(latency_ms, 2),
        }


async def check_database_health(conn_db: ConnDB) -> bool:
    """
    Verifica la conectividad con la base de datos.

    Returns:
        bool: True si la base de datos responde
    """
    return await conn_db.test_connection()


async def check_redis_health() -> bool:
    return await test_redis_connection()


def get_uptime_info() -> Dict[str, Any]:
    """
    Obtiene información de uptime de la aplicación.

    Returns:
        Dict: Información de uptime
    """
    current_time = datetime.now(timezone.utc)
    uptime_delta = current_time - _app_start_time

    return {
        "start_time": _app_start_time.isoformat(),
        "uptime_seconds": int(uptime_delta.total_seconds()),
        "uptime_human": format_uptime(uptime_delta),
    }


def format_uptime(uptime_delta: timedelta) -> str:
    """
    Formatea el uptime en formato legible.

    Args:
        uptime_delta: Delta de tiempo de uptime

    Returns:
        str: Uptime formateado
    """
    days = uptime_delta.days
    hours, remainder = divmod(uptime_delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")

    return " ".join(parts)
