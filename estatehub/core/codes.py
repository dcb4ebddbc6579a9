"""Sequential human-readable codes (``CON-0001``, ``UNT-0042``, ...)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from estatehub.common.exceptions import CodeAllocationError
from estatehub.common.logging import get_logger
from estatehub.config import settings
from estatehub.db.models import Client, Contract, Project, Unit

logger = get_logger("codes")


class CodeGenerator:
    """Allocate the next code after the highest existing one for a prefix.

    The allocation is advisory: callers must still check uniqueness, and the
    unique index on the column is what finally rejects a concurrent duplicate.
    """

    def __init__(self, prefix: str, column: InstrumentedAttribute, padding: int | None = None):
        self.prefix = prefix
        self.column = column
        self.padding = padding if padding is not None else settings.CODE_PADDING

    async def next_code(self, db: AsyncSession) -> str:
        try:
            result = await db.execute(
                select(self.column)
                .where(self.column.startswith(self.prefix, autoescape=True))
            )
            existing = result.scalars().all()
        except SQLAlchemyError as e:
            logger.exception("Code lookup failed for prefix %s", self.prefix)
            raise CodeAllocationError(self.prefix) from e

        return self.format(self._highest_number(existing) + 1)

    def format(self, number: int) -> str:
        return f"{self.prefix}{number:0{self.padding}d}"

    def _highest_number(self, codes: list[str]) -> int:
        # Manually entered codes may be padded differently, so compare numerically
        suffixes = (code[len(self.prefix):] for code in codes)
        return max((int(s) for s in suffixes if s.isascii() and s.isdigit()), default=0)


def client_codes() -> CodeGenerator:
    return CodeGenerator("CLI-", Client.code)


def project_codes() -> CodeGenerator:
    return CodeGenerator("PRJ-", Project.code)


def unit_codes() -> CodeGenerator:
    return CodeGenerator("UNT-", Unit.code)


def contract_numbers() -> CodeGenerator:
    return CodeGenerator(settings.CONTRACT_NO_PREFIX, Contract.contract_no)
