"""
Seed script for EstateHub.

Populates the database with demo projects, units and clients, then issues a
few contracts through the regular issuance path so that installments and
audit entries are generated exactly as the API would.

Usage:
    python -m estatehub.scripts.seed
"""

import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy import select

from estatehub.common.enums import PlanType, ProjectStatus, UnitStatus
from estatehub.common.logging import get_logger, setup_logging
from estatehub.core.contracts.schemas import ContractCreateRequest
from estatehub.core.contracts.service import ContractService
from estatehub.db.models import Client, Project, Unit
from estatehub.db.session import async_session_factory

logger = get_logger("scripts.seed")


async def main() -> None:
    setup_logging()
    async with async_session_factory() as session:
        # ------------------------------------------------------------------
        # Guard: skip if already seeded
        # ------------------------------------------------------------------
        result = await session.execute(select(Project).where(Project.code == "PRJ-0001"))
        if result.scalar_one_or_none() is not None:
            logger.info("Database already seeded -- skipping.")
            return

        # ==================================================================
        # PROJECTS
        # ==================================================================
        gardens = Project(
            code="PRJ-0001",
            name="Palm Gardens Compound",
            location="6th of October City",
            status=ProjectStatus.ACTIVE.value,
            start_date=date(2024, 9, 1),
            budget=Decimal("85000000.00"),
            description="Gated compound of 40 villas and townhouses",
        )
        towers = Project(
            code="PRJ-0002",
            name="Nile View Towers",
            location="Maadi",
            status=ProjectStatus.ACTIVE.value,
            start_date=date(2025, 1, 15),
            budget=Decimal("120000000.00"),
            description="Two residential towers with river-facing apartments",
        )
        session.add_all([gardens, towers])
        await session.flush()

        # ==================================================================
        # UNITS
        # ==================================================================
        units_data = [
            (gardens, "UNT-0001", "Villa A1", "villa", 320.0, 0, "6500000"),
            (gardens, "UNT-0002", "Villa A2", "villa", 320.0, 0, "6650000"),
            (gardens, "UNT-0003", "Townhouse B1", "townhouse", 210.0, 0, "4200000"),
            (gardens, "UNT-0004", "Townhouse B2", "townhouse", 210.0, 0, "4250000"),
            (towers, "UNT-0005", "Apartment 3B", "apartment", 145.5, 3, "2750000"),
            (towers, "UNT-0006", "Apartment 7A", "apartment", 160.0, 7, "3100000"),
            (towers, "UNT-0007", "Penthouse 18", "penthouse", 280.0, 18, "7900000"),
        ]
        units = []
        for project, code, name, unit_type, area, floor, price in units_data:
            unit = Unit(
                code=code,
                name=name,
                project_id=project.id,
                type=unit_type,
                area=area,
                floor=floor,
                price=Decimal(price),
                status=UnitStatus.AVAILABLE.value,
            )
            units.append(unit)
        units[3].status = UnitStatus.RESERVED.value
        session.add_all(units)

        # ==================================================================
        # CLIENTS
        # ==================================================================
        clients = [
            Client(code="CLI-0001", name="Nadia Haddad", phone="+20 100 555 0101", email="nadia@example.com"),
            Client(code="CLI-0002", name="Omar Saleh", phone="+20 111 555 0102"),
            Client(code="CLI-0003", name="Laila Fathy", phone="+20 122 555 0103", address="Heliopolis, Cairo"),
        ]
        session.add_all(clients)
        await session.commit()

        # ==================================================================
        # CONTRACTS
        # ==================================================================
        service = ContractService(session)
        requests = [
            ContractCreateRequest(
                date=date(2025, 2, 1),
                client_id=clients[0].id,
                unit_id=units[0].id,
                total_amount=Decimal("6500000"),
                down_payment=Decimal("1300000"),
                discount=Decimal("100000"),
                commission=Decimal("65000"),
                months=20,
                plan_type=PlanType.QUARTERLY,
                notes="Five-year quarterly plan",
            ),
            ContractCreateRequest(
                date=date(2025, 3, 10),
                client_id=clients[1].id,
                unit_id=units[4].id,
                total_amount=Decimal("2750000"),
                down_payment=Decimal("550000"),
                months=36,
                plan_type=PlanType.MONTHLY,
            ),
            ContractCreateRequest(
                date=date(2025, 4, 1),
                client_id=clients[2].id,
                unit_id=units[6].id,
                total_amount=Decimal("7900000"),
                down_payment=Decimal("2900000"),
                months=5,
                plan_type=PlanType.YEARLY,
            ),
        ]
        for request in requests:
            contract = await service.issue(request)
            logger.info("Seeded contract %s", contract.contract_no)

        logger.info(
            "Seeded: 2 projects, %d units, %d clients, %d contracts",
            len(units),
            len(clients),
            len(requests),
        )


if __name__ == "__main__":
    asyncio.run(main())
