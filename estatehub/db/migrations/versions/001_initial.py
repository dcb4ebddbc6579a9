"""Initial schema - sales back office tables

Revision ID: 001
Revises: None
Create Date: 2025-01-10
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _common_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def _fk(column: str, target: str) -> sa.Column:
    return sa.Column(
        column,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(target),
        nullable=False,
        index=True,
    )


def upgrade() -> None:
    # Clients
    op.create_table(
        "clients",
        *_common_columns(),
        sa.Column("code", sa.String(50), unique=True, nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
    )

    # Projects
    op.create_table(
        "projects",
        *_common_columns(),
        sa.Column("code", sa.String(50), unique=True, nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("start_date", sa.Date, nullable=True),
        sa.Column("budget", sa.Numeric(14, 2), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
    )

    # Units
    op.create_table(
        "units",
        *_common_columns(),
        sa.Column("code", sa.String(50), unique=True, nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=True),
        _fk("project_id", "projects.id"),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("area", sa.Float, nullable=True),
        sa.Column("floor", sa.Integer, nullable=True),
        sa.Column("price", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="available", index=True),
        sa.Column("notes", sa.Text, nullable=True),
    )

    # Contracts
    op.create_table(
        "contracts",
        *_common_columns(),
        sa.Column("contract_no", sa.String(50), unique=True, nullable=False, index=True),
        sa.Column("date", sa.Date, nullable=False, index=True),
        _fk("client_id", "clients.id"),
        _fk("unit_id", "units.id"),
        _fk("project_id", "projects.id"),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("down_payment", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("discount", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("commission", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("months", sa.Integer, nullable=False),
        sa.Column("plan_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active", index=True),
        sa.Column("notes", sa.Text, nullable=True),
    )

    # Installments
    op.create_table(
        "installments",
        *_common_columns(),
        _fk("contract_id", "contracts.id"),
        _fk("client_id", "clients.id"),
        _fk("unit_id", "units.id"),
        sa.Column("installment_no", sa.Integer, nullable=False),
        sa.Column("due_date", sa.Date, nullable=False, index=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.UniqueConstraint("contract_id", "installment_no", name="uq_installments_contract_id"),
    )

    # Audit log
    op.create_table(
        "audit_log",
        *_common_columns(),
        sa.Column("entity_type", sa.String(100), nullable=False, index=True),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("meta", postgresql.JSONB, nullable=True),
    )


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("installments")
    op.drop_table("contracts")
    op.drop_table("units")
    op.drop_table("projects")
    op.drop_table("clients")
