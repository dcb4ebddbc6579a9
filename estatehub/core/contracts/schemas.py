from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import Field, model_validator

from estatehub.common.enums import PlanType
from estatehub.common.schemas import CamelModel
from estatehub.db.models import Contract, Installment

# ---------- Requests ----------

CONTRACT_NO_MAX_LENGTH = 50
MAX_PERIODS = 600


class ContractCreateRequest(CamelModel):
    contract_no: str | None = Field(default=None, max_length=CONTRACT_NO_MAX_LENGTH)
    date: dt.date
    client_id: uuid.UUID
    unit_id: uuid.UUID
    total_amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    down_payment: Decimal = Field(ge=0, max_digits=14, decimal_places=2)
    months: int = Field(gt=0, le=MAX_PERIODS, strict=True)
    plan_type: PlanType
    discount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=14, decimal_places=2)
    commission: Decimal = Field(default=Decimal("0"), ge=0, max_digits=14, decimal_places=2)
    notes: str | None = None

    @model_validator(mode="after")
    def _check_balance(self) -> "ContractCreateRequest":
        if self.down_payment + self.discount > self.total_amount:
            raise ValueError("downPayment plus discount cannot exceed totalAmount")
        return self

    @property
    def requested_contract_no(self) -> str | None:
        if self.contract_no and self.contract_no.strip():
            return self.contract_no.strip()
        return None


# ---------- Responses ----------


class ProjectSummary(CamelModel):
    id: uuid.UUID
    code: str
    name: str


class ClientSummary(CamelModel):
    id: uuid.UUID
    code: str
    name: str


class UnitSummary(CamelModel):
    id: uuid.UUID
    code: str
    name: str | None
    type: str
    project: ProjectSummary


class InstallmentCount(CamelModel):
    installments: int


class InstallmentResponse(CamelModel):
    id: uuid.UUID
    contract_id: uuid.UUID
    client_id: uuid.UUID
    unit_id: uuid.UUID
    installment_no: int
    due_date: dt.date
    amount: Decimal
    paid_amount: Decimal
    status: str

    @classmethod
    def from_installment(cls, installment: Installment) -> "InstallmentResponse":
        return cls.model_validate(installment)


class ContractResponse(CamelModel):
    id: uuid.UUID
    contract_no: str
    date: dt.date
    client: ClientSummary
    unit: UnitSummary
    total_amount: Decimal
    down_payment: Decimal
    months: int
    plan_type: PlanType
    discount: Decimal
    commission: Decimal
    status: str
    notes: str | None
    count: InstallmentCount = Field(alias="_count")

    @classmethod
    def from_contract(cls, contract: Contract, installment_count: int, **extra):
        return cls(
            id=contract.id,
            contract_no=contract.contract_no,
            date=contract.date,
            client=ClientSummary.model_validate(contract.client),
            unit=UnitSummary.model_validate(contract.unit),
            total_amount=contract.total_amount,
            down_payment=contract.down_payment,
            months=contract.months,
            plan_type=contract.plan_type,
            discount=contract.discount,
            commission=contract.commission,
            status=contract.status,
            notes=contract.notes,
            count=InstallmentCount(installments=installment_count),
            **extra,
        )


class ContractDetailResponse(ContractResponse):
    installments: list[InstallmentResponse]


class GenerateInstallmentsResponse(CamelModel):
    success: bool
    message: str
    installments: list[InstallmentResponse]
