import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.api.deps import get_contract_service, get_db
from estatehub.core.contracts.schemas import (
    ContractCreateRequest,
    ContractDetailResponse,
    ContractResponse,
    GenerateInstallmentsResponse,
    InstallmentResponse,
)
from estatehub.core.contracts.service import ContractService
from estatehub.db.models.contract import Contract

router = APIRouter(prefix="/contracts", tags=["Contracts"])


# ---------- Endpoints ----------


@router.post("", response_model=ContractResponse, status_code=201)
async def create_contract(
    body: ContractCreateRequest,
    service: ContractService = Depends(get_contract_service),
):
    contract = await service.issue(body)
    return ContractResponse.from_contract(contract, await service.installment_count(contract.id))


@router.get("", response_model=list[ContractResponse])
async def list_contracts(
    client_id: uuid.UUID | None = Query(None, alias="clientId"),
    unit_id: uuid.UUID | None = Query(None, alias="unitId"),
    status: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    service: ContractService = Depends(get_contract_service),
):
    query = select(Contract).where(Contract.is_deleted.is_(False))
    if client_id:
        query = query.where(Contract.client_id == client_id)
    if unit_id:
        query = query.where(Contract.unit_id == unit_id)
    if status:
        query = query.where(Contract.status == status)

    result = await db.execute(query.order_by(Contract.date.desc(), Contract.created_at.desc()))
    contracts = result.scalars().all()
    counts = await service.installment_counts([c.id for c in contracts])
    return [ContractResponse.from_contract(c, counts.get(c.id, 0)) for c in contracts]


@router.get("/{contract_id}", response_model=ContractDetailResponse)
async def get_contract(
    contract_id: uuid.UUID,
    service: ContractService = Depends(get_contract_service),
):
    contract = await service.get_contract(contract_id)
    installments = await service.list_installments(contract.id)
    return ContractDetailResponse.from_contract(
        contract,
        len(installments),
        installments=[InstallmentResponse.from_installment(i) for i in installments],
    )


@router.post("/{contract_id}/generate-installments", response_model=GenerateInstallmentsResponse)
async def generate_installments(
    contract_id: uuid.UUID,
    service: ContractService = Depends(get_contract_service),
):
    installments = await service.generate_installments(contract_id)
    return GenerateInstallmentsResponse(
        success=True,
        message=f"Generated {len(installments)} installments",
        installments=[InstallmentResponse.from_installment(i) for i in installments],
    )
