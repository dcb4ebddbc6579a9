import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from estatehub.common.enums import PlanType, UnitStatus
from estatehub.common.exceptions import UnitUnavailableError
from estatehub.core.contracts.schemas import ContractCreateRequest
from estatehub.core.contracts.service import ContractService
from estatehub.db.models import AuditLog, Contract, Installment, Unit


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar()


async def _unit_status(session_factory, unit_id) -> str:
    async with session_factory() as session:
        return (await session.execute(select(Unit.status).where(Unit.id == unit_id))).scalar_one()


@pytest.mark.asyncio
async def test_create_contract(client, contract_payload, buyer, unit, project):
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 201
    data = response.json()
    assert data["contractNo"] == "CON-0001"
    assert data["date"] == "2025-01-15"
    assert data["status"] == "active"
    assert data["planType"] == "MONTHLY"
    assert data["totalAmount"] == "120000.00"
    assert data["downPayment"] == "20000.00"
    assert data["discount"] == "0.00"
    assert data["commission"] == "0.00"
    assert data["client"] == {"id": str(buyer.id), "code": "CLI-0001", "name": "Nadia Haddad"}
    assert data["unit"]["code"] == unit.code
    assert data["unit"]["type"] == "villa"
    assert data["unit"]["project"] == {"id": str(project.id), "code": "PRJ-0001", "name": "Palm Gardens"}
    assert data["_count"] == {"installments": 10}


@pytest.mark.asyncio
async def test_contract_copies_project_and_sells_unit(client, contract_payload, unit, project, session_factory):
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 201

    async with session_factory() as session:
        contract = (await session.execute(select(Contract))).scalar_one()
    assert contract.project_id == project.id
    assert await _unit_status(session_factory, unit.id) == UnitStatus.SOLD.value


@pytest.mark.asyncio
async def test_monthly_schedule_is_persisted(client, contract_payload):
    create_resp = await client.post("/api/contracts", json=contract_payload)
    contract_id = create_resp.json()["id"]

    response = await client.get(f"/api/contracts/{contract_id}")
    assert response.status_code == 200
    installments = response.json()["installments"]
    assert [i["installmentNo"] for i in installments] == list(range(1, 11))
    assert all(i["amount"] == "10000.00" for i in installments)
    assert all(i["paidAmount"] == "0.00" for i in installments)
    assert all(i["status"] == "pending" for i in installments)
    assert [i["dueDate"] for i in installments] == [f"2025-{m:02d}-15" for m in range(2, 12)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "plan_type, months, expected",
    [
        ("QUARTERLY", 4, ["2025-04-15", "2025-07-15", "2025-10-15", "2026-01-15"]),
        ("YEARLY", 2, ["2026-01-15", "2027-01-15"]),
    ],
)
async def test_cadence_due_dates(client, contract_payload, plan_type, months, expected):
    contract_payload.update(planType=plan_type, months=months)
    create_resp = await client.post("/api/contracts", json=contract_payload)
    assert create_resp.status_code == 201

    response = await client.get(f"/api/contracts/{create_resp.json()['id']}")
    assert [i["dueDate"] for i in response.json()["installments"]] == expected


@pytest.mark.asyncio
async def test_single_installment_boundary(client, contract_payload):
    contract_payload.update(months=1, discount=5000)
    create_resp = await client.post("/api/contracts", json=contract_payload)
    assert create_resp.status_code == 201

    installments = (await client.get(f"/api/contracts/{create_resp.json()['id']}")).json()["installments"]
    assert len(installments) == 1
    assert installments[0]["amount"] == "95000.00"
    assert installments[0]["dueDate"] == "2025-02-15"


@pytest.mark.asyncio
async def test_audit_entry_written_once(client, contract_payload, session_factory):
    create_resp = await client.post("/api/contracts", json=contract_payload)
    contract_id = create_resp.json()["id"]

    async with session_factory() as session:
        entries = (await session.execute(select(AuditLog))).scalars().all()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.action == "CREATE"
    assert entry.entity_type == "Contract"
    assert str(entry.entity_id) == contract_id
    assert entry.meta["contractNo"] == "CON-0001"
    assert entry.meta["installmentsGenerated"] == contract_payload["months"]


@pytest.mark.asyncio
async def test_explicit_contract_number(client, contract_payload):
    contract_payload["contractNo"] = "  SALE-2025-007 "
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 201
    assert response.json()["contractNo"] == "SALE-2025-007"


@pytest.mark.asyncio
async def test_blank_contract_number_is_generated(client, contract_payload):
    contract_payload["contractNo"] = "   "
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 201
    assert response.json()["contractNo"] == "CON-0001"


@pytest.mark.asyncio
async def test_duplicate_contract_number_rejected(client, contract_payload, make_unit, session_factory):
    contract_payload["contractNo"] = "CON-0500"
    first_unit_id = uuid.UUID(contract_payload["unitId"])
    first = await client.post("/api/contracts", json=contract_payload)
    assert first.status_code == 201

    other_unit = await make_unit()
    contract_payload["unitId"] = str(other_unit.id)
    second = await client.post("/api/contracts", json=contract_payload)
    assert second.status_code == 400
    assert "already exists" in second.json()["error"]

    assert await _unit_status(session_factory, other_unit.id) == UnitStatus.AVAILABLE.value
    assert await _unit_status(session_factory, first_unit_id) == UnitStatus.SOLD.value
    assert await _count(session_factory, Contract) == 1


@pytest.mark.asyncio
async def test_sold_unit_cannot_be_sold_again(client, contract_payload, session_factory):
    first = await client.post("/api/contracts", json=contract_payload)
    assert first.status_code == 201

    second = await client.post("/api/contracts", json=contract_payload)
    assert second.status_code == 400
    assert "not available" in second.json()["error"]

    assert await _count(session_factory, Contract) == 1
    assert await _count(session_factory, Installment) == 10
    assert await _count(session_factory, AuditLog) == 1


@pytest.mark.asyncio
async def test_reserved_unit_is_unavailable(client, contract_payload, make_unit):
    reserved = await make_unit(status=UnitStatus.RESERVED)
    contract_payload["unitId"] = str(reserved.id)
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 400
    assert "reserved" in response.json()["error"]


@pytest.mark.asyncio
async def test_unknown_unit(client, contract_payload):
    contract_payload["unitId"] = str(uuid.uuid4())
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 400
    assert "Unit" in response.json()["error"]


@pytest.mark.asyncio
async def test_unknown_client(client, contract_payload, unit, session_factory):
    contract_payload["clientId"] = str(uuid.uuid4())
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 400
    assert "Client" in response.json()["error"]
    assert await _unit_status(session_factory, unit.id) == UnitStatus.AVAILABLE.value


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, value",
    [
        ("totalAmount", 0),
        ("downPayment", -1),
        ("months", 0),
        ("months", 2.5),
        ("planType", "WEEKLY"),
        ("clientId", "not-a-uuid"),
        ("date", "someday"),
    ],
)
async def test_invalid_input_rejected(client, contract_payload, field, value, session_factory):
    contract_payload[field] = value
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid input"
    assert any(field in detail["loc"] for detail in body["details"])
    assert field in body["message"]
    assert await _count(session_factory, Contract) == 0


@pytest.mark.asyncio
async def test_missing_required_field(client, contract_payload):
    del contract_payload["unitId"]
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 400
    assert any("unitId" in detail["loc"] for detail in response.json()["details"])


@pytest.mark.asyncio
async def test_negative_balance_rejected(client, contract_payload, unit, session_factory):
    contract_payload.update(downPayment=100000, discount=30000)
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 400
    assert "cannot exceed" in response.json()["message"]
    assert await _unit_status(session_factory, unit.id) == UnitStatus.AVAILABLE.value


@pytest.mark.asyncio
async def test_too_many_periods_rejected(client, contract_payload, unit, session_factory):
    contract_payload["months"] = 601
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 400
    assert any("months" in detail["loc"] for detail in response.json()["details"])
    assert await _unit_status(session_factory, unit.id) == UnitStatus.AVAILABLE.value


@pytest.mark.asyncio
async def test_overlong_contract_number_rejected(client, contract_payload, session_factory):
    contract_payload["contractNo"] = "C" * 51
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 400
    assert any("contractNo" in detail["loc"] for detail in response.json()["details"])
    assert await _count(session_factory, Contract) == 0


@pytest.mark.asyncio
async def test_contract_number_at_column_width_accepted(client, contract_payload):
    contract_payload["contractNo"] = "C" * 50
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 201
    assert response.json()["contractNo"] == "C" * 50


@pytest.mark.asyncio
async def test_schedule_past_last_calendar_year_rolls_back(client, contract_payload, unit, session_factory):
    contract_payload.update(date="9990-01-15", months=600, planType="MONTHLY")
    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 400
    assert "cannot be built" in response.json()["error"]
    assert await _unit_status(session_factory, unit.id) == UnitStatus.AVAILABLE.value
    assert await _count(session_factory, Contract) == 0
    assert await _count(session_factory, Installment) == 0
    assert await _count(session_factory, AuditLog) == 0

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failing_step", ["_create_contract", "_mark_unit_sold", "_insert_installments", "_append_audit"]
)
async def test_fault_inside_transaction_rolls_back(
    client, contract_payload, unit, session_factory, monkeypatch, failing_step
):
    async def boom(self, uow, *args):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ContractService, failing_step, boom)

    response = await client.post("/api/contracts", json=contract_payload)
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to create contract"
    assert "disk" not in body["message"]

    assert await _unit_status(session_factory, unit.id) == UnitStatus.AVAILABLE.value
    assert await _count(session_factory, Contract) == 0
    assert await _count(session_factory, Installment) == 0
    assert await _count(session_factory, AuditLog) == 0


@pytest.mark.asyncio
async def test_unit_sold_between_check_and_write(buyer, unit, session_factory, monkeypatch):
    original_load = ContractService._load_available_unit

    async def load_then_lose_race(self, unit_id):
        loaded = await original_load(self, unit_id)
        async with session_factory() as other:
            competitor = await other.get(Unit, unit_id)
            competitor.status = UnitStatus.SOLD.value
            await other.commit()
        return loaded

    monkeypatch.setattr(ContractService, "_load_available_unit", load_then_lose_race)

    body = ContractCreateRequest(
        date=date(2025, 1, 15),
        client_id=buyer.id,
        unit_id=unit.id,
        total_amount=Decimal("120000"),
        down_payment=Decimal("20000"),
        months=10,
        plan_type=PlanType.MONTHLY,
    )
    async with session_factory() as session:
        with pytest.raises(UnitUnavailableError):
            await ContractService(session).issue(body)

    assert await _count(session_factory, Contract) == 0
    assert await _count(session_factory, Installment) == 0
    assert await _count(session_factory, AuditLog) == 0


@pytest.mark.asyncio
async def test_list_contracts_with_filters(client, contract_payload, make_unit, buyer):
    await client.post("/api/contracts", json=contract_payload)
    second_unit = await make_unit()
    contract_payload.update(unitId=str(second_unit.id), date="2025-03-01", months=4)
    await client.post("/api/contracts", json=contract_payload)

    response = await client.get("/api/contracts")
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 2
    # Newest contract date first
    assert data[0]["date"] == "2025-03-01"
    assert data[0]["_count"] == {"installments": 4}

    by_unit = await client.get("/api/contracts", params={"unitId": str(second_unit.id)})
    assert [c["unit"]["id"] for c in by_unit.json()] == [str(second_unit.id)]

    by_client = await client.get("/api/contracts", params={"clientId": str(buyer.id), "status": "active"})
    assert len(by_client.json()) == 2

    none = await client.get("/api/contracts", params={"status": "cancelled"})
    assert none.json() == []


@pytest.mark.asyncio
async def test_contract_not_found(client):
    response = await client.get(f"/api/contracts/{uuid.uuid4()}")
    assert response.status_code == 404
    assert "not found" in response.json()["error"]


# ---------- Installment generation for existing contracts ----------


async def _contract_without_installments(session_factory, buyer, unit) -> Contract:
    async with session_factory() as session:
        contract = Contract(
            contract_no="CON-0900",
            date=date(2025, 1, 31),
            client_id=buyer.id,
            unit_id=unit.id,
            project_id=unit.project_id,
            total_amount=Decimal("100000"),
            down_payment=Decimal("0"),
            months=3,
            plan_type=PlanType.MONTHLY.value,
        )
        session.add(contract)
        await session.commit()
        return contract


@pytest.mark.asyncio
async def test_generate_installments(client, buyer, unit, session_factory):
    contract = await _contract_without_installments(session_factory, buyer, unit)

    response = await client.post(f"/api/contracts/{contract.id}/generate-installments")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    installments = data["installments"]
    assert [i["amount"] for i in installments] == ["33333.33", "33333.33", "33333.34"]
    assert [i["dueDate"] for i in installments] == ["2025-02-28", "2025-03-31", "2025-04-30"]


@pytest.mark.asyncio
async def test_generate_installments_twice_rejected(client, buyer, unit, session_factory):
    contract = await _contract_without_installments(session_factory, buyer, unit)
    await client.post(f"/api/contracts/{contract.id}/generate-installments")

    response = await client.post(f"/api/contracts/{contract.id}/generate-installments")
    assert response.status_code == 400
    assert await _count(session_factory, Installment) == 3


@pytest.mark.asyncio
async def test_generate_installments_unknown_contract(client):
    response = await client.post(f"/api/contracts/{uuid.uuid4()}/generate-installments")
    assert response.status_code == 404
