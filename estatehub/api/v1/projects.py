import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.api.deps import get_db
from estatehub.common.enums import ProjectStatus
from estatehub.common.exceptions import DuplicateCodeError, NotFoundError
from estatehub.common.schemas import CamelModel
from estatehub.core.codes import project_codes
from estatehub.db.models.project import Project

router = APIRouter(prefix="/projects", tags=["Projects"])


# ---------- Schemas ----------


class ProjectCreateRequest(CamelModel):
    code: str | None = None
    name: str = Field(min_length=1)
    location: str | None = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    start_date: date | None = None
    budget: Decimal | None = Field(default=None, gt=0)
    description: str | None = None


class ProjectResponse(CamelModel):
    id: uuid.UUID
    code: str
    name: str
    location: str | None
    status: str
    start_date: date | None
    budget: Decimal | None
    description: str | None


# ---------- Endpoints ----------


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(body: ProjectCreateRequest, db: AsyncSession = Depends(get_db)):
    code = (body.code or "").strip() or await project_codes().next_code(db)

    existing = await db.execute(select(Project.id).where(Project.code == code))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateCodeError("Project", code)

    project = Project(
        code=code,
        name=body.name,
        location=body.location,
        status=body.status.value,
        start_date=body.start_date,
        budget=body.budget,
        description=body.description,
    )
    db.add(project)
    await db.flush()
    await db.refresh(project)
    return ProjectResponse.model_validate(project)


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    status: ProjectStatus | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = select(Project).where(Project.is_deleted.is_(False))
    if status:
        query = query.where(Project.status == status.value)
    result = await db.execute(query.order_by(Project.created_at.desc()))
    return [ProjectResponse.model_validate(p) for p in result.scalars().all()]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Project).where(Project.id == project_id, Project.is_deleted.is_(False))
    )
    project = result.scalar_one_or_none()
    if not project:
        raise NotFoundError("Project", str(project_id))
    return ProjectResponse.model_validate(project)
