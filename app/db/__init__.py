"""
Módulo de acceso a base de datos.

- ConnDB: Gestión exclusiva de conexiones
- schema: Definición de tablas (SQLAlchemy Core)
- repositories: Operaciones por agregado
"""

from app.db.connection import (
    ConnDB,
    close_database,
    get_db_connection,
    initialize_database,
)

__all__ = [
    "ConnDB",
    "get_db_connection",
    "initialize_database",
    "close_database",
]
