from estatehub.db.models.audit import AuditLog
from estatehub.db.models.client import Client
from estatehub.db.models.contract import Contract
from estatehub.db.models.installment import Installment
from estatehub.db.models.project import Project
from estatehub.db.models.unit import Unit

__all__ = [
    "AuditLog",
    "Client",
    "Contract",
    "Installment",
    "Project",
    "Unit",
]
