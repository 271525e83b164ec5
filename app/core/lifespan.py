"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación,
incluyendo inicialización de la base de datos, verificación de tablas,
backend de locks de cuenta y limpieza.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import get_settings, validate_required_settings
from app.core.logging_config import setup_logging
from app.core.redis_client import close_redis, initialize_redis
from app.db.connection import close_database, get_db_connection, initialize_database
from app.services.orders.factories import create_dependencies

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Args:
        app: Instancia de FastAPI
    """
    # === STARTUP ===
    logger.info(f"🚀 Iniciando {settings.APP_NAME}...")

    try:
        # 1. Configurar logging
        await startup_configure_logging()

        # 2. Verificar configuración
        await startup_verify_configuration()

        # 3. Base de datos y tablas
        await startup_initialize_database()

        # 4. Backend de locks de cuenta
        await startup_initialize_lock_backend()

        await startup_final_checks()

        logger.info("🎉 Aplicación iniciada correctamente")

    except Exception as e:
        logger.error(f"❌ Error durante el startup: {e}")
        await shutdown_close_connections()
        raise

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")
    await shutdown_close_connections()
    logger.info("👋 Aplicación cerrada correctamente")


# === FUNCIONES DE STARTUP ===


async def startup_configure_logging():
    """Configura el sistema de logging."""
    setup_logging()
    logger.info("✅ Sistema de logging configurado")


async def startup_verify_configuration():
    """Verifica que la configuración sea válida."""
    validate_required_settings()
    logger.info("✅ Configuración verificada")


async def startup_initialize_database():
    """
    Inicializa la conexión, crea el esquema si está habilitado y
    comprueba que cada repositorio puede leer sus tablas.
    """
    await initialize_database()

    conn_db = get_db_connection()
    deps = create_dependencies(conn_db)
    for repository in (deps.account_repo, deps.order_repo, deps.line_repo, deps.payment_repo, deps.catalog_repo):
        await repository.initialize()

    health_info = await conn_db.health_check()
    logger.info(f"✅ Base de datos lista ({conn_db.safe_url}): {health_info['response_time_ms']}ms")


async def startup_initialize_lock_backend():
    """Redis si está configurado y responde; si no, locks en proceso."""
    if await initialize_redis():
        logger.info("✅ Locks de cuenta en Redis")
    else:
        logger.warning("⚠️ Locks de cuenta en proceso: válidos solo con un único worker")


async def startup_final_checks():
    """Log de configuración activa."""
    logger.info("🔧 Configuración activa:")
    logger.info(f"   - Entorno: {settings.ENVIRONMENT}")
    logger.info(f"   - Debug: {settings.DEBUG}")
    logger.info(f"   - Moneda: {settings.CURRENCY}")
    logger.info(f"   - Reintentos CAS del ledger: {settings.LEDGER_MAX_CAS_ATTEMPTS}")


# === FUNCIONES DE SHUTDOWN ===


async def shutdown_close_connections():
    """Cierra conexiones de manera limpia."""
    await close_redis()
    await close_database()
    logger.info("✅ Conexiones cerradas")
