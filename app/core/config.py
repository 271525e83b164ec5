"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.
"""

import re
from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Commerce Back-Office Ledger"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    WORKERS: int = 1
    LOG_LEVEL: str = "INFO"

    # === CONFIGURACIÓN DE SEGURIDAD ===
    # Lista separada por comas
    ALLOWED_HOSTS: str = "*"
    ENABLE_DOCS: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # === CONFIGURACIÓN DE BASE DE DATOS ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./backoffice.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False
    CREATE_SCHEMA_ON_STARTUP: bool = True

    # === CONFIGURACIÓN DE REDIS (locks por cuenta) ===
    REDIS_URL: Optional[str] = None
    REDIS_SOCKET_TIMEOUT: int = 5

    # === CONFIGURACIÓN DEL LEDGER ===
    CURRENCY: str = "USD"
    # Vida máxima del lock distribuido
    ACCOUNT_LOCK_TIMEOUT_SECONDS: float = 30.0
    # Espera máxima para adquirir el lock antes de responder 409
    ACCOUNT_LOCK_WAIT_SECONDS: float = 10.0
    LEDGER_MAX_CAS_ATTEMPTS: int = 3

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = "logs/app.log"
    LOG_MAX_SIZE_MB: int = 10
    LOG_BACKUP_COUNT: int = 5
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # === CONFIGURACIÓN DE MONITOREO ===
    SLOW_REQUEST_THRESHOLD: float = 5.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @field_validator("CURRENCY")
    @classmethod
    def validate_currency(cls, v):
        """Valida el código ISO 4217 de la moneda."""
        if not re.fullmatch(r"[A-Za-z]{3}", v or ""):
            raise ValueError("CURRENCY debe ser un código ISO de 3 letras")
        return v.upper()

    @field_validator("LEDGER_MAX_CAS_ATTEMPTS")
    @classmethod
    def validate_cas_attempts(cls, v):
        """Al menos un intento de escritura."""
        if v < 1:
            raise ValueError("LEDGER_MAX_CAS_ATTEMPTS debe ser >= 1")
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def allowed_hosts_list(self) -> List[str]:
        """Parsea ALLOWED_HOSTS como lista separada por comas."""
        return [host.strip() for host in self.ALLOWED_HOSTS.split(",") if host.strip()]

    @property
    def is_sqlite(self) -> bool:
        """Indica si la base de datos configurada es SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Usa LRU cache para evitar recrear la configuración
    múltiples veces durante la ejecución.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


# Instancia global para uso directo
settings = get_settings()


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para testing).

    Returns:
        Settings: Nueva instancia de configuración
    """
    get_settings.cache_clear()
    return get_settings()


def validate_required_settings() -> bool:
    """
    Valida que todas las configuraciones requeridas estén presentes.

    Returns:
        bool: True si todas las configuraciones están presentes

    Raises:
        ValueError: Si alguna configuración requerida falta
    """
    current = get_settings()

    required_fields = ["DATABASE_URL", "CURRENCY", "API_V1_PREFIX"]
    missing_fields = []
    for field in required_fields:
        value = getattr(current, field, None)
        if not value or (isinstance(value, str) and not value.strip()):
            missing_fields.append(field)

    if missing_fields:
        raise ValueError(f"Configuraciones requeridas faltantes: {missing_fields}")

    return True
