"""
Referential validator for optional foreign keys.

Every orchestrator validates the references it received before writing
anything. A missing (None) reference is vacuously valid.
"""

import logging
from typing import Any, Iterable, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.reference_repository import EntityKind, ReferenceRepository
from app.utils.error_handler import ValidationException

logger = logging.getLogger(__name__)


class ReferenceValidator:
    """Checks that referenced rows exist."""

    def __init__(self, reference_repo: ReferenceRepository):
        self.reference_repo = reference_repo

    async def exists(self, session: AsyncSession, kind: EntityKind, entity_id: Any) -> bool:
        """
        Args:
            kind: Referenced entity
            entity_id: Primary key, or None for an absent optional reference

        Returns:
            bool: True if entity_id is None or the row exists
        """
        if entity_id is None:
            return True
        return await self.reference_repo.count_by_id(session, kind, entity_id) > 0

    async def ensure(self, session: AsyncSession, field: str, kind: EntityKind, entity_id: Any) -> None:
        """
        Raises:
            ValidationException: If the referenced row does not exist
        """
        if not await self.exists(session, kind, entity_id):
            logger.info(f"Reference check failed: {field}={entity_id} ({kind.value})")
            raise ValidationException(
                message=f"Invalid {field}: {entity_id}. {kind.value} does not exist.",
                field=field,
                invalid_value=entity_id,
            )

    async def ensure_all(self, session: AsyncSession, references: Iterable[Tuple[str, EntityKind, Any]]) -> None:
        """Check references in order, stopping at the first failure."""
        for field, kind, entity_id in references:
            await self.ensure(session, field, kind, entity_id)
