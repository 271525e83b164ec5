"""
Version information endpoints.
"""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from app.version import VERSION, version_info, version_string

router = APIRouter()


class VersionResponse(BaseModel):
    """Full version information response."""

    version: str
    python_version: str
    git_commit: str | None
    build_date: str
    build_number: str | None
    environment: str


class ShortVersionResponse(BaseModel):
    version: str
    version_string: str


@router.get(
    "",
    response_model=VersionResponse,
    summary="Get version information",
    description="Returns version information including build metadata",
)
async def get_version() -> dict[str, Any]:
    return version_info()


@router.get("/short", response_model=ShortVersionResponse, summary="Get short version")
async def get_version_short() -> dict[str, str]:
    return {
        "version": VERSION,
        "version_string": version_string(),
    }
