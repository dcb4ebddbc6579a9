import uuid

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from estatehub.db.base import BaseModel


class AuditLog(BaseModel):
    """Append-only record of state-changing actions."""

    __tablename__ = "audit_log"

    entity_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    meta: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
