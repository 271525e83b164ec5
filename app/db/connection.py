# app/db/connection.py
"""
Clase ConnDB para gestión de conexiones a la base de datos relacional.

Esta clase maneja la conexión, configuración del pool, creación del
esquema y ciclo de vida de las sesiones asíncronas.
"""

import logging
import time
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import get_settings
from app.db.schema import metadata
from app.utils.error_handler import DatabaseConnectionException

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class ConnDB:
    """
    Gestión de conexiones a la base de datos.

    Una instancia por URL de base de datos; la aplicación usa la instancia
    compartida devuelta por get_db_connection().
    """

    def __init__(self, database_url: Optional[str] = None):
        """
        Inicializa la clase ConnDB.

        Args:
            database_url: URL SQLAlchemy asíncrona; por defecto DATABASE_URL
        """
        settings = get_settings()
        self.connection_string = database_url or settings.DATABASE_URL
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._connection_tested = False
        logger.info("ConnDB instance created")

    @property
    def is_sqlite(self) -> bool:
        return self.connection_string.startswith("sqlite")

    async def initialize(self, create_schema: bool = False):
        """
        Inicializa el engine de base de datos y el pool de conexiones.

        Args:
            create_schema: Crear las tablas que no existan

        Raises:
            DatabaseConnectionException: Si falla la inicialización
        """
        if self.engine is not None:
            logger.info("Database connection already initialized")
            return

        settings = get_settings()
        logger.info("Initializing database connection...")

        try:
            engine_kwargs = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
            if not self.is_sqlite:
                engine_kwargs.update(
                    pool_size=settings.DB_POOL_SIZE,
                    max_overflow=settings.DB_MAX_OVERFLOW,
                    pool_recycle=3600,
                    pool_timeout=30,
                )

            self.engine = create_async_engine(self.connection_string, **engine_kwargs)

            if self.is_sqlite:
                event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

            self.session_factory = async_sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=True
            )

            if create_schema:
                await self.create_schema()

            await self._test_connection()

            logger.info("Database connection initialized successfully")

        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to initialize database connection: {e}")
            await self._cleanup_failed_initialization()
            raise DatabaseConnectionException(
                message=f"Failed to initialize database connection: {str(e)}",
                database_url=self.safe_url,
            ) from e

    async def create_schema(self):
        """Crea las tablas del esquema que aún no existan."""
        if self.engine is None:
            raise DatabaseConnectionException(
                message="Database connection not initialized. Call initialize() first.",
                database_url=self.safe_url,
            )
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        logger.info(f"Schema ready ({len(metadata.tables)} tables)")

    async def _test_connection(self):
        """
        Prueba la conexión a la base de datos.

        Raises:
            DatabaseConnectionException: Si la prueba de conexión falla
        """
        logger.info("Testing database connection...")

        async with self.session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            if result.scalar() != 1:
                raise DatabaseConnectionException(
                    message="Connection test returned unexpected value",
                    database_url=self.safe_url,
                )

        self._connection_tested = True

    async def _cleanup_failed_initialization(self):
        """Limpia recursos en caso de fallo de inicialización."""
        if self.engine:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        self._connection_tested = False

    def get_session(self) -> AsyncSession:
        """
        Obtiene una nueva sesión de base de datos.

        Returns:
            AsyncSession: Sesión asíncrona de SQLAlchemy

        Raises:
            DatabaseConnectionException: Si no hay conexión inicializada
        """
        if not self.is_initialized():
            raise DatabaseConnectionException(
                message="Database connection not initialized. Call initialize() first.",
                database_url=self.safe_url,
            )

        return self.session_factory()

    def is_initialized(self) -> bool:
        """
        Verifica si la conexión está inicializada.

        Returns:
            bool: True si está inicializada y probada
        """
        return self.engine is not None and self.session_factory is not None and self._connection_tested

    async def test_connection(self) -> bool:
        """
        Prueba la conexión a la base de datos de forma no destructiva.

        Returns:
            bool: True si la conexión funciona correctamente
        """
        if not self.is_initialized():
            return False

        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except SQLAlchemyError as e:
            logger.error(f"Connection test failed: {e}")
            return False

    async def close(self):
        """
        Cierra la conexión y limpia todos los recursos.
        """
        logger.info("Closing database connection...")

        if self.engine:
            await self.engine.dispose()
            logger.info("Database engine disposed")

        self.engine = None
        self.session_factory = None
        self._connection_tested = False

    @property
    def safe_url(self) -> str:
        """URL sin contraseña, apta para logs y respuestas."""
        return make_url(self.connection_string).render_as_string(hide_password=True)

    def get_engine_info(self) -> dict:
        """
        Obtiene información sobre el engine de base de datos.

        Returns:
            dict: Información del engine y pool de conexiones
        """
        if not self.engine:
            return {"status": "not_initialized"}

        return {
            "status": "initialized",
            "dialect": self.engine.dialect.name,
            "database_url": self.safe_url,
            "pool": self.engine.pool.status(),
            "is_tested": self._connection_tested,
        }

    async def health_check(self) -> dict:
        """
        Realiza un health check completo de la conexión.

        Returns:
            dict: Estado de salud de la conexión
        """
        start_time = time.time()
        test_passed = await self.test_connection()

        return {
            "connection_initialized": self.is_initialized(),
            "engine_info": self.get_engine_info(),
            "test_passed": test_passed,
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }

    def __repr__(self) -> str:
        return (
            f"ConnDB(initialized={self.is_initialized()}, "
            f"url={self.safe_url!r})"
        )


# Instancia global
_conn_db_instance: Optional[ConnDB] = None


def get_db_connection() -> ConnDB:
    """
    Obtiene la instancia compartida de ConnDB.

    También se usa como dependencia de FastAPI.

    Returns:
        ConnDB: Instancia de conexión a base de datos
    """
    global _conn_db_instance

    if _conn_db_instance is None:
        _conn_db_instance = ConnDB()

    return _conn_db_instance


async def initialize_database():
    """
    Función de conveniencia para inicializar la base de datos.
    """
    settings = get_settings()
    conn_db = get_db_connection()
    await conn_db.initialize(create_schema=settings.CREATE_SCHEMA_ON_STARTUP)


async def close_database():
    """
    Función de conveniencia para cerrar la base de datos.
    """
    global _conn_db_instance

    if _conn_db_instance is not None:
        await _conn_db_instance.close()
        _conn_db_instance = None
