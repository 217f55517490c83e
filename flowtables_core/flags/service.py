"""
Flag Service

Reads and writes platform flags.
"""

import logging
from enum import Enum
from typing import Any, Optional, Union

from ..database.base import DatabaseManager
from ..database.repositories import FlagRepository

logger = logging.getLogger(__name__)


class FlagId(str, Enum):
    """Known flag keys."""

    PUBLIC_URL = "PUBLIC_URL"


class FlagService:
    """Service for platform flags."""

    def __init__(self, database: DatabaseManager):
        self._database = database

    async def get_one(self, flag_id: Union[FlagId, str]) -> Optional[Any]:
        """Get a flag value, or None when the flag is unset."""
        async with self._database.session() as session:
            flag = await FlagRepository(session).get_by_id(_key(flag_id))
        return flag.value if flag is not None else None

    async def save(self, flag_id: Union[FlagId, str], value: Any) -> None:
        """Create or replace a flag value."""
        async with self._database.transaction() as session:
            await FlagRepository(session).save(_key(flag_id), value)
        logger.info(f"Flag saved: {_key(flag_id)}")


def _key(flag_id: Union[FlagId, str]) -> str:
    return flag_id.value if isinstance(flag_id, FlagId) else flag_id
