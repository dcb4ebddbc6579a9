from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from estatehub.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class UnitOfWork:
    """One atomic transaction over a session.

    Steps that must commit or roll back together take the ``UnitOfWork``
    rather than the bare session. Leaving the block normally commits; any
    exception rolls back everything done inside it and propagates.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            await self.session.commit()
        else:
            await self.session.rollback()
        return False
