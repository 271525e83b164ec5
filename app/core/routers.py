"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo se encarga de registrar todos los routers de la API,
configurar endpoints base y organizar las rutas de manera estructurada.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

# Importar routers de la API
from app.api.v1.endpoints.accounts import router as accounts_router
from app.api.v1.endpoints.inventory import router as inventory_router
from app.api.v1.endpoints.order_lines import router as order_lines_router
from app.api.v1.endpoints.orders import router as orders_router
from app.api.v1.endpoints.payments import router as payments_router
from app.api.v1.endpoints.transactions import router as transactions_router
from app.api.v1.endpoints.version import router as version_router
from app.core.config import get_settings
from app.core.health import get_health_status
from app.db.connection import ConnDB, get_db_connection

settings = get_settings()
logger = logging.getLogger(__name__)

# (router, ruta relativa al prefijo v1, tag)
API_V1_ROUTERS = (
    (orders_router, "/orders", "Orders"),
    (order_lines_router, "/order-lines", "Order Lines"),
    (payments_router, "/payments", "Payments"),
    (accounts_router, "/accounts", "Accounts"),
    (transactions_router, "/transactions", "Transactions"),
    (inventory_router, "/inventory", "Inventory"),
    (version_router, "/version", "Info"),
)


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        """
        Endpoint raíz que proporciona información básica de la API.

        Returns:
            Dict con información de la API
        """
        return {
            "message": settings.APP_NAME,
            "description": "Pedidos, pagos y saldos de cuentas de cliente",
            "version": settings.APP_VERSION,
            "status": "running",
            "documentation": "/docs" if settings.ENABLE_DOCS else "disabled",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": get_router_info()["base_paths"],
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        """
        Endpoint simple para verificar que la API responde.

        Returns:
            Dict con pong y timestamp
        """
        return {"message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check(conn_db: ConnDB = Depends(get_db_connection)):
        """
        Verifica la base de datos (y Redis si está configurado).

        Returns:
            JSONResponse 200 si la base de datos responde, 503 si no
        """
        health_status = await get_health_status(conn_db)
        status_code = 200 if health_status["overall"] else 503

        if status_code != 200:
            logger.warning(f"⚠️ Health check no saludable: {health_status['services']}")

        return JSONResponse(
            status_code=status_code,
            content={
                "status": "healthy" if health_status["overall"] else "unhealthy",
                "version": settings.APP_VERSION,
                "timestamp": health_status["timestamp"],
                "uptime": health_status["uptime"],
                "services": health_status["services"],
                "environment": settings.ENVIRONMENT,
            },
        )


def configure_api_v1_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la API v1.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando routers de API v1...")

    for router, path, tag in API_V1_ROUTERS:
        app.include_router(
            router,
            prefix=f"{settings.API_V1_PREFIX}{path}",
            tags=[tag],
            responses={500: {"description": "Internal server error"}},
        )
        logger.debug(f"Router {tag} configurado en {settings.API_V1_PREFIX}{path}")

    logger.info(f"✅ {len(API_V1_ROUTERS)} routers de API v1 configurados")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando todos los routers...")

    create_root_endpoints(app)
    create_health_endpoints(app)
    configure_api_v1_routers(app)

    logger.info("✅ Todos los routers configurados correctamente")


def get_router_info() -> Dict[str, Any]:
    """
    Obtiene información sobre los routers configurados.

    Returns:
        Dict con información de routers
    """
    base_paths = {"root": "/", "health": "/health"}
    for _, path, _ in API_V1_ROUTERS:
        base_paths[path.strip("/").replace("-", "_")] = f"{settings.API_V1_PREFIX}{path}"

    return {"api_version": "v1", "base_paths": base_paths}
