import uuid

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.api.deps import get_db
from estatehub.common.exceptions import DuplicateCodeError, NotFoundError
from estatehub.common.schemas import CamelModel
from estatehub.core.codes import client_codes
from estatehub.db.models.client import Client

router = APIRouter(prefix="/clients", tags=["Clients"])


# ---------- Schemas ----------


class ClientCreateRequest(CamelModel):
    code: str | None = None
    name: str = Field(min_length=1)
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    notes: str | None = None


class ClientResponse(CamelModel):
    id: uuid.UUID
    code: str
    name: str
    phone: str | None
    email: str | None
    address: str | None
    notes: str | None


# ---------- Endpoints ----------


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(body: ClientCreateRequest, db: AsyncSession = Depends(get_db)):
    code = (body.code or "").strip() or await client_codes().next_code(db)

    existing = await db.execute(select(Client.id).where(Client.code == code))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateCodeError("Client", code)

    client = Client(
        code=code,
        name=body.name,
        phone=body.phone,
        email=body.email or None,
        address=body.address,
        notes=body.notes,
    )
    db.add(client)
    await db.flush()
    await db.refresh(client)
    return ClientResponse.model_validate(client)


@router.get("", response_model=list[ClientResponse])
async def list_clients(
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = select(Client).where(Client.is_deleted.is_(False))
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(Client.name.ilike(pattern), Client.code.ilike(pattern), Client.phone.ilike(pattern))
        )
    result = await db.execute(query.order_by(Client.created_at.desc()))
    return [ClientResponse.model_validate(c) for c in result.scalars().all()]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(client_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Client).where(Client.id == client_id, Client.is_deleted.is_(False))
    )
    client = result.scalar_one_or_none()
    if not client:
        raise NotFoundError("Client", str(client_id))
    return ClientResponse.model_validate(client)
