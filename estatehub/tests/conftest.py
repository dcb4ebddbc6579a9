from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import JSON, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from estatehub.common.enums import UnitStatus
from estatehub.db.base import Base
from estatehub.db.models import *  # noqa: F401,F403 - ensure all models loaded
from estatehub.db.models import Client, Project, Unit


# Make JSONB render as JSON for SQLite
@event.listens_for(Base.metadata, "before_create")
def _remap_jsonb(target, connection, **kw):
    if connection.dialect.name == "sqlite":
        for table in target.tables.values():
            for column in table.columns:
                if isinstance(column.type, JSONB):
                    column.type = JSON()


@pytest.fixture
async def test_engine(tmp_path):
    # A fresh file database per test: commits and rollbacks are real
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    from estatehub.api.deps import get_db
    from estatehub.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def project(db_session):
    project = Project(code="PRJ-0001", name="Palm Gardens")
    db_session.add(project)
    await db_session.commit()
    return project


@pytest.fixture
async def buyer(db_session):
    buyer = Client(code="CLI-0001", name="Nadia Haddad", phone="+20100000001")
    db_session.add(buyer)
    await db_session.commit()
    return buyer


@pytest.fixture
def make_unit(db_session, project):
    counter = {"n": 0}

    async def _make_unit(status: UnitStatus = UnitStatus.AVAILABLE, price: str = "150000") -> Unit:
        counter["n"] += 1
        unit = Unit(
            code=f"UNT-{counter['n']:04d}",
            name=f"Villa {counter['n']}",
            project_id=project.id,
            type="villa",
            price=Decimal(price),
            status=status.value,
        )
        db_session.add(unit)
        await db_session.commit()
        return unit

    return _make_unit


@pytest.fixture
async def unit(make_unit):
    return await make_unit()


@pytest.fixture
def contract_payload(buyer, unit):
    return {
        "date": "2025-01-15",
        "clientId": str(buyer.id),
        "unitId": str(unit.id),
        "totalAmount": 120000,
        "downPayment": 20000,
        "months": 10,
        "planType": "MONTHLY",
    }
