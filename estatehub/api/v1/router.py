from fastapi import APIRouter

from estatehub.api.v1.clients import router as clients_router
from estatehub.api.v1.contracts import router as contracts_router
from estatehub.api.v1.installments import router as installments_router
from estatehub.api.v1.projects import router as projects_router
from estatehub.api.v1.units import router as units_router

v1_router = APIRouter()

v1_router.include_router(clients_router)
v1_router.include_router(projects_router)
v1_router.include_router(units_router)
v1_router.include_router(contracts_router)
v1_router.include_router(installments_router)
