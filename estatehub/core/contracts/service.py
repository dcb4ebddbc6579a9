import uuid

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.common.enums import AuditAction, ContractStatus, InstallmentStatus, UnitStatus
from estatehub.common.exceptions import (
    ClientNotFoundError,
    DuplicateContractNumberError,
    EstateHubException,
    InstallmentsAlreadyGeneratedError,
    InvalidInputError,
    NotFoundError,
    TransactionFailureError,
    UnitNotFoundError,
    UnitUnavailableError,
)
from estatehub.common.logging import get_logger
from estatehub.config import settings
from estatehub.core.codes import CodeGenerator, contract_numbers
from estatehub.core.contracts.schedule import ScheduledInstallment, build_schedule
from estatehub.core.contracts.schemas import ContractCreateRequest
from estatehub.db.models import AuditLog, Client, Contract, Installment, Unit
from estatehub.db.session import UnitOfWork

logger = get_logger("contracts.service")


class ContractService:
    def __init__(self, db: AsyncSession, numbers: CodeGenerator | None = None):
        self.db = db
        self.numbers = numbers or contract_numbers()

    # ---------- Issuance ----------

    async def issue(self, body: ContractCreateRequest) -> Contract:
        """Create a contract, sell its unit and schedule its installments.

        Business-rule checks run before the transaction and leave nothing
        behind. The writes run in a single ``UnitOfWork``: either the
        contract, the unit status change, every installment and the audit
        entry are committed together, or none of them are.
        """
        contract_no = body.requested_contract_no or await self.numbers.next_code(self.db)
        await self._ensure_contract_no_free(contract_no)
        await self._ensure_client_exists(body.client_id)
        unit = await self._load_available_unit(body.unit_id)

        try:
            async with UnitOfWork(self.db) as uow:
                contract = await self._create_contract(uow, body, contract_no, unit)
                await self._mark_unit_sold(uow, unit)
                schedule = self._plan_installments(body)
                await self._insert_installments(uow, contract, schedule)
                await self._append_audit(uow, contract, len(schedule))
        except EstateHubException:
            raise
        except SQLAlchemyError as e:
            logger.exception("Contract %s rolled back", contract_no)
            raise TransactionFailureError("Failed to create contract") from e

        logger.info(
            "Issued contract %s for unit %s with %d installments",
            contract_no,
            unit.code,
            len(schedule),
        )
        return await self.get_contract(contract.id)

    async def _ensure_contract_no_free(self, contract_no: str) -> None:
        result = await self.db.execute(
            select(Contract.id).where(Contract.contract_no == contract_no)
        )
        if result.scalar_one_or_none() is not None:
            raise DuplicateContractNumberError(contract_no)

    async def _ensure_client_exists(self, client_id: uuid.UUID) -> None:
        result = await self.db.execute(
            select(Client.id).where(Client.id == client_id, Client.is_deleted.is_(False))
        )
        if result.scalar_one_or_none() is None:
            raise ClientNotFoundError(str(client_id))

    async def _load_available_unit(self, unit_id: uuid.UUID) -> Unit:
        result = await self.db.execute(
            select(Unit).where(Unit.id == unit_id, Unit.is_deleted.is_(False))
        )
        unit = result.scalar_one_or_none()
        if not unit:
            raise UnitNotFoundError(str(unit_id))
        if unit.status != UnitStatus.AVAILABLE.value:
            raise UnitUnavailableError(unit.code, unit.status)
        return unit

    async def _create_contract(
        self, uow: UnitOfWork, body: ContractCreateRequest, contract_no: str, unit: Unit
    ) -> Contract:
        contract = Contract(
            contract_no=contract_no,
            date=body.date,
            client_id=body.client_id,
            unit_id=unit.id,
            project_id=unit.project_id,
            total_amount=body.total_amount,
            down_payment=body.down_payment,
            discount=body.discount,
            commission=body.commission,
            months=body.months,
            plan_type=body.plan_type.value,
            status=ContractStatus.ACTIVE.value,
            notes=body.notes,
        )
        uow.session.add(contract)
        await uow.session.flush()
        return contract

    async def _mark_unit_sold(self, uow: UnitOfWork, unit: Unit) -> None:
        # Compare-and-set: a unit sold since it was loaded matches zero rows
        result = await uow.session.execute(
            update(Unit)
            .where(Unit.id == unit.id, Unit.status == UnitStatus.AVAILABLE.value)
            .values(status=UnitStatus.SOLD.value)
            .execution_options(synchronize_session="evaluate")
        )
        if result.rowcount == 0:
            raise UnitUnavailableError(unit.code)

    def _plan_installments(self, body: ContractCreateRequest) -> list[ScheduledInstallment]:
        try:
            return build_schedule(
                anchor=body.date,
                total_amount=body.total_amount,
                down_payment=body.down_payment,
                periods=body.months,
                plan_type=body.plan_type,
                discount=body.discount,
                remainder_on_last=settings.INSTALLMENT_REMAINDER_ON_LAST,
            )
        except (ValueError, OverflowError) as e:
            # date() rejects years past 9999
            raise InvalidInputError(f"Installment schedule cannot be built: {e}") from e

    async def _insert_installments(
        self, uow: UnitOfWork, contract: Contract, schedule: list[ScheduledInstallment]
    ) -> None:
        if not schedule:
            return
        await uow.session.execute(
            insert(Installment),
            [
                {
                    "contract_id": contract.id,
                    "client_id": contract.client_id,
                    "unit_id": contract.unit_id,
                    "installment_no": item.installment_no,
                    "due_date": item.due_date,
                    "amount": item.amount,
                    "paid_amount": 0,
                    "status": InstallmentStatus.PENDING.value,
                }
                for item in schedule
            ],
        )

    async def _append_audit(self, uow: UnitOfWork, contract: Contract, installment_count: int) -> None:
        uow.session.add(
            AuditLog(
                entity_type="Contract",
                entity_id=contract.id,
                action=AuditAction.CREATE.value,
                meta={
                    "contractNo": contract.contract_no,
                    "clientId": str(contract.client_id),
                    "unitId": str(contract.unit_id),
                    "installmentsGenerated": installment_count,
                },
            )
        )
        await uow.session.flush()

    # ---------- Regeneration ----------

    async def generate_installments(self, contract_id: uuid.UUID) -> list[Installment]:
        """Schedule installments for a contract that has none.

        The final installment absorbs the rounding residue so the schedule
        sums exactly to the financed balance.
        """
        contract = await self.get_contract(contract_id)
        if await self.installment_count(contract.id):
            raise InstallmentsAlreadyGeneratedError(contract.contract_no)

        schedule = build_schedule(
            anchor=contract.date,
            total_amount=contract.total_amount,
            down_payment=contract.down_payment,
            periods=contract.months,
            plan_type=contract.plan_type,
            discount=contract.discount,
            remainder_on_last=True,
        )

        try:
            async with UnitOfWork(self.db) as uow:
                await self._insert_installments(uow, contract, schedule)
        except SQLAlchemyError as e:
            logger.exception("Installment generation for contract %s rolled back", contract.contract_no)
            raise TransactionFailureError("Failed to generate installments") from e

        logger.info("Generated %d installments for contract %s", len(schedule), contract.contract_no)
        return await self.list_installments(contract.id)

    # ---------- Reads ----------

    async def get_contract(self, contract_id: uuid.UUID) -> Contract:
        result = await self.db.execute(
            select(Contract)
            .where(Contract.id == contract_id, Contract.is_deleted.is_(False))
            .execution_options(populate_existing=True)
        )
        contract = result.scalar_one_or_none()
        if not contract:
            raise NotFoundError("Contract", str(contract_id))
        return contract

    async def list_installments(self, contract_id: uuid.UUID) -> list[Installment]:
        result = await self.db.execute(
            select(Installment)
            .where(Installment.contract_id == contract_id, Installment.is_deleted.is_(False))
            .order_by(Installment.installment_no)
        )
        return list(result.scalars().all())

    async def installment_count(self, contract_id: uuid.UUID) -> int:
        counts = await self.installment_counts([contract_id])
        return counts.get(contract_id, 0)

    async def installment_counts(self, contract_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]:
        if not contract_ids:
            return {}
        result = await self.db.execute(
            select(Installment.contract_id, func.count(Installment.id))
            .where(Installment.contract_id.in_(contract_ids), Installment.is_deleted.is_(False))
            .group_by(Installment.contract_id)
        )
        return {contract_id: count for contract_id, count in result.all()}
