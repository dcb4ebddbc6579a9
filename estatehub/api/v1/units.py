import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.api.deps import get_db
from estatehub.common.enums import AuditAction, UnitStatus
from estatehub.common.exceptions import BadRequestError, DuplicateCodeError, NotFoundError
from estatehub.common.logging import get_logger
from estatehub.common.schemas import CamelModel
from estatehub.core.codes import unit_codes
from estatehub.core.contracts.schemas import ProjectSummary
from estatehub.db.models.audit import AuditLog
from estatehub.db.models.project import Project
from estatehub.db.models.unit import Unit

router = APIRouter(prefix="/units", tags=["Units"])

logger = get_logger("api.units")


# ---------- Schemas ----------


class UnitCreateRequest(CamelModel):
    code: str | None = None
    name: str | None = None
    project_id: uuid.UUID
    type: str = Field(min_length=1)
    area: float | None = Field(default=None, gt=0)
    floor: int | None = None
    price: Decimal = Field(gt=0)
    status: UnitStatus = UnitStatus.AVAILABLE
    notes: str | None = None


class UnitResponse(CamelModel):
    id: uuid.UUID
    code: str
    name: str | None
    project_id: uuid.UUID
    project: ProjectSummary
    type: str
    area: float | None
    floor: int | None
    price: Decimal
    status: str
    notes: str | None


# ---------- Endpoints ----------


@router.post("", response_model=UnitResponse, status_code=201)
async def create_unit(body: UnitCreateRequest, db: AsyncSession = Depends(get_db)):
    project_result = await db.execute(
        select(Project).where(Project.id == body.project_id, Project.is_deleted.is_(False))
    )
    project = project_result.scalar_one_or_none()
    if not project:
        raise BadRequestError(f"Project '{body.project_id}' not found")

    code = (body.code or "").strip() or await unit_codes().next_code(db)
    existing = await db.execute(select(Unit.id).where(Unit.code == code))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateCodeError("Unit", code)

    unit = Unit(
        code=code,
        name=body.name,
        project_id=project.id,
        type=body.type,
        area=body.area,
        floor=body.floor,
        price=body.price,
        status=body.status.value,
        notes=body.notes,
    )
    unit.project = project
    db.add(unit)
    await db.flush()

    db.add(
        AuditLog(
            entity_type="Unit",
            entity_id=unit.id,
            action=AuditAction.CREATE.value,
            meta={"code": unit.code, "projectId": str(unit.project_id)},
        )
    )
    await db.flush()
    await db.refresh(unit)
    logger.info("Created unit %s in project %s", unit.code, project.code)
    return UnitResponse.model_validate(unit)


@router.get("", response_model=list[UnitResponse])
async def list_units(
    status: UnitStatus | None = Query(None),
    project_id: uuid.UUID | None = Query(None, alias="projectId"),
    db: AsyncSession = Depends(get_db),
):
    query = select(Unit).where(Unit.is_deleted.is_(False))
    if status:
        query = query.where(Unit.status == status.value)
    if project_id:
        query = query.where(Unit.project_id == project_id)
    result = await db.execute(query.order_by(Unit.created_at.desc()))
    return [UnitResponse.model_validate(u) for u in result.scalars().all()]


@router.get("/{unit_id}", response_model=UnitResponse)
async def get_unit(unit_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Unit).where(Unit.id == unit_id, Unit.is_deleted.is_(False))
    )
    unit = result.scalar_one_or_none()
    if not unit:
        raise NotFoundError("Unit", str(unit_id))
    return UnitResponse.model_validate(unit)
