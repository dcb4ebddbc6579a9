import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.api.deps import get_db
from estatehub.common.enums import InstallmentStatus
from estatehub.core.contracts.schemas import InstallmentResponse
from estatehub.db.models.installment import Installment

router = APIRouter(prefix="/installments", tags=["Installments"])


@router.get("", response_model=list[InstallmentResponse])
async def list_installments(
    status: str | None = Query(None),
    contract_id: uuid.UUID | None = Query(None, alias="contractId"),
    client_id: uuid.UUID | None = Query(None, alias="clientId"),
    overdue: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    query = select(Installment).where(Installment.is_deleted.is_(False))
    if contract_id:
        query = query.where(Installment.contract_id == contract_id)
    if client_id:
        query = query.where(Installment.client_id == client_id)

    if overdue:
        query = query.where(
            Installment.status == InstallmentStatus.PENDING.value,
            Installment.due_date < date.today(),
        )
    elif status:
        query = query.where(Installment.status == status)

    result = await db.execute(query.order_by(Installment.due_date, Installment.installment_no))
    return [InstallmentResponse.from_installment(i) for i in result.scalars().all()]
