import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from estatehub.common.enums import InstallmentStatus
from estatehub.db.base import ZERO, BaseModel, Money


class Installment(BaseModel):
    __tablename__ = "installments"
    __table_args__ = (UniqueConstraint("contract_id", "installment_no"),)

    contract_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("contracts.id"), nullable=False, index=True
    )
    # Denormalized from the contract for filtering
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False, index=True
    )
    unit_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("units.id"), nullable=False, index=True
    )
    installment_no: Mapped[int] = mapped_column(Integer, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Money(), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Money(), nullable=False, default=ZERO)
    status: Mapped[InstallmentStatus] = mapped_column(
        String(20), nullable=False, default=InstallmentStatus.PENDING, index=True
    )

    # Relationships
    contract = relationship("Contract", back_populates="installments")
