from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from estatehub.db.base import BaseModel


class Client(BaseModel):
    __tablename__ = "clients"

    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    contracts = relationship("Contract", back_populates="client")
