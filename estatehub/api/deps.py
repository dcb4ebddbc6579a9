from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.core.contracts.service import ContractService
from estatehub.db.session import async_session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_contract_service(db: AsyncSession = Depends(get_db)) -> ContractService:
    return ContractService(db)
