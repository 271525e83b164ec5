"""
Modelos Pydantic compartidos por los endpoints.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class DeleteResponse(BaseModel):
    """Respuesta de un borrado correcto."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Cuerpo de error común a todos los endpoints."""

    error: str
    error_code: str
    details: Dict[str, Any] = Field(default_factory=dict)
