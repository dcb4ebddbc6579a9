import uuid
import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from estatehub.common.enums import ContractStatus, PlanType
from estatehub.db.base import ZERO, BaseModel, Money


class Contract(BaseModel):
    __tablename__ = "contracts"

    contract_no: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False, index=True
    )
    unit_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("units.id"), nullable=False, index=True
    )
    # Copied from the unit at issuance
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False, index=True
    )
    total_amount: Mapped[Decimal] = mapped_column(Money(), nullable=False)
    down_payment: Mapped[Decimal] = mapped_column(Money(), nullable=False, default=ZERO)
    discount: Mapped[Decimal] = mapped_column(Money(), nullable=False, default=ZERO)
    commission: Mapped[Decimal] = mapped_column(Money(), nullable=False, default=ZERO)
    months: Mapped[int] = mapped_column(Integer, nullable=False)
    plan_type: Mapped[PlanType] = mapped_column(String(20), nullable=False)
    status: Mapped[ContractStatus] = mapped_column(
        String(20), nullable=False, default=ContractStatus.ACTIVE, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    client = relationship("Client", back_populates="contracts", lazy="selectin")
    unit = relationship("Unit", back_populates="contracts", lazy="selectin")
    project = relationship("Project", lazy="selectin")
    installments = relationship(
        "Installment", back_populates="contract", order_by="Installment.installment_no"
    )
