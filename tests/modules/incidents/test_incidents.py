from datetime import datetime, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit import list_audit_entries
from src.core.exceptions import NotFoundError, PersistenceError
from src.core.sequences.allocator import current_year
from src.modules.incidents.models import IncidentStatus, IncidentType
from src.modules.incidents.schemas import IncidentCreate, IncidentStatusUpdate
from src.modules.incidents.service import IncidentService


def _incident_data(**overrides) -> IncidentCreate:
    data = {
        "type": IncidentType.AVVIK,
        "title": "Oil spill in workshop",
        "description": "Hydraulic oil leaked from the press onto the floor.",
        "severity": 3,
        "occurred_at": datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc),
        "reported_by": "user-1",
        "location": "Workshop B",
    }
    data.update(overrides)
    return IncidentCreate(**data)


class TestIncidentService:
    """Tests for incident registration."""

    async def test_create_incident_assigns_reference_number(self, db_session: AsyncSession):
        service = IncidentService(db_session)

        incident = await service.create_incident("t1", _incident_data(), user_id="user-1")

        assert incident.id is not None
        assert incident.reference_number == f"AV-{current_year()}-001"
        assert incident.status == IncidentStatus.OPEN.value
        assert incident.tenant_id == "t1"

    async def test_all_incident_types_share_sequence(self, db_session: AsyncSession):
        service = IncidentService(db_session)

        first = await service.create_incident("t1", _incident_data(type=IncidentType.SKADE))
        second = await service.create_incident("t1", _incident_data(type=IncidentType.NESTEN))

        year = current_year()
        assert first.reference_number == f"AV-{year}-001"
        assert second.reference_number == f"AV-{year}-002"

    async def test_tenants_number_independently(self, db_session: AsyncSession):
        service = IncidentService(db_session)

        await service.create_incident("t1", _incident_data())
        other = await service.create_incident("t2", _incident_data())

        assert other.reference_number == f"AV-{current_year()}-001"

    async def test_create_writes_audit_entry(self, db_session: AsyncSession):
        service = IncidentService(db_session)

        incident = await service.create_incident("t1", _incident_data(), user_id="user-9")

        entries = await list_audit_entries(db_session, "t1", entity_type="Incident")
        assert len(entries) == 1
        assert entries[0].entity_id == incident.id
        assert entries[0].entity_identifier == incident.reference_number
        assert entries[0].user_id == "user-9"
        assert entries[0].action == "INCIDENT_CREATED"

    async def test_allocation_failure_aborts_creation(self, db_session: AsyncSession, monkeypatch):
        service = IncidentService(db_session)

        async def fail(*args, **kwargs):
            raise PersistenceError()

        monkeypatch.setattr(service.allocator, "next_number", fail)

        with pytest.raises(PersistenceError):
            await service.create_incident("t1", _incident_data())

        assert await service.list_incidents("t1") == []

    async def test_get_incident_is_tenant_scoped(self, db_session: AsyncSession):
        service = IncidentService(db_session)
        incident = await service.create_incident("t1", _incident_data())

        assert (await service.get_incident("t1", incident.id)).id == incident.id
        with pytest.raises(NotFoundError):
            await service.get_incident("t2", incident.id)

    async def test_list_incidents_filters(self, db_session: AsyncSession):
        service = IncidentService(db_session)
        await service.create_incident(
            "t1",
            _incident_data(type=IncidentType.SKADE, occurred_at=datetime(2025, 1, 1, tzinfo=timezone.utc)),
        )
        await service.create_incident(
            "t1",
            _incident_data(type=IncidentType.AVVIK, occurred_at=datetime(2025, 2, 1, tzinfo=timezone.utc)),
        )

        all_incidents = await service.list_incidents("t1")
        assert [i.type for i in all_incidents] == ["AVVIK", "SKADE"]

        injuries = await service.list_incidents("t1", type="SKADE")
        assert len(injuries) == 1

    async def test_update_status(self, db_session: AsyncSession):
        service = IncidentService(db_session)
        incident = await service.create_incident("t1", _incident_data())
        reference_number = incident.reference_number

        updated = await service.update_status(
            "t1", incident.id, IncidentStatusUpdate(status=IncidentStatus.INVESTIGATING), user_id="user-2"
        )

        assert updated.status == "INVESTIGATING"
        assert updated.reference_number == reference_number
        assert await service.list_incidents("t1", status="OPEN") == []

        entries = await list_audit_entries(db_session, "t1", entity_type="Incident", entity_id=incident.id)
        update_entry = next(e for e in entries if e.action == "UPDATE")
        assert update_entry.new_values == {"status": "INVESTIGATING", "previous_status": "OPEN"}
        assert update_entry.user_id == "user-2"

    async def test_update_status_is_tenant_scoped(self, db_session: AsyncSession):
        service = IncidentService(db_session)
        incident = await service.create_incident("t1", _incident_data())

        with pytest.raises(NotFoundError):
            await service.update_status("t2", incident.id, IncidentStatusUpdate(status=IncidentStatus.CLOSED))


class TestIncidentSchemas:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"title": "Oil"},
            {"description": "Too short"},
            {"severity": 0},
            {"severity": 6},
            {"type": "UNKNOWN"},
        ],
    )
    def test_invalid_input(self, overrides):
        with pytest.raises(ValueError):
            _incident_data(**overrides)


class TestIncidentsApi:
    """Tests for /api/v1/incidents."""

    async def test_create_and_get(self, client: AsyncClient):
        payload = {
            "type": "AVVIK",
            "title": "Missing guard rail",
            "description": "Guard rail on the mezzanine stairs has been removed.",
            "severity": 4,
            "occurred_at": "2025-05-02T10:00:00Z",
            "reported_by": "user-1",
        }

        res = await client.post("/api/v1/incidents", json=payload)
        assert res.status_code == 201, res.text
        created = res.json()["data"]
        assert created["reference_number"] == f"AV-{current_year()}-001"
        assert created["status"] == "OPEN"

        res = await client.get(f"/api/v1/incidents/{created['id']}")
        assert res.status_code == 200, res.text
        assert res.json()["data"]["reference_number"] == created["reference_number"]

        res = await client.get(f"/api/v1/incidents/{created['id']}", headers={"X-Tenant-ID": "tenant-b"})
        assert res.status_code == 404

    async def test_create_validation_error(self, client: AsyncClient):
        res = await client.post(
            "/api/v1/incidents",
            json={
                "type": "AVVIK",
                "title": "Bad",
                "description": "short",
                "severity": 9,
                "occurred_at": "2025-05-02T10:00:00Z",
                "reported_by": "user-1",
            },
        )

        assert res.status_code == 422
        fields = {e["field"] for e in res.json()["errors"]}
        assert {"title", "description", "severity"} <= fields

    async def test_list(self, client: AsyncClient):
        payload = {
            "type": "MILJO",
            "title": "Chemical smell",
            "description": "Strong solvent smell near the paint booth exhaust.",
            "severity": 2,
            "occurred_at": "2025-06-01T08:00:00Z",
            "reported_by": "user-1",
        }
        await client.post("/api/v1/incidents", json=payload)
        await client.post("/api/v1/incidents", json=payload)

        res = await client.get("/api/v1/incidents", params={"type": "MILJO"})
        assert res.status_code == 200, res.text
        numbers = [i["reference_number"] for i in res.json()["data"]]
        year = current_year()
        assert sorted(numbers) == [f"AV-{year}-001", f"AV-{year}-002"]

    async def test_update_status(self, client: AsyncClient):
        payload = {
            "type": "SKADE",
            "title": "Cut on left hand",
            "description": "Operator cut their hand on an unguarded sheet edge.",
            "severity": 3,
            "occurred_at": "2025-06-03T12:00:00Z",
            "reported_by": "user-1",
        }
        created = (await client.post("/api/v1/incidents", json=payload)).json()["data"]

        res = await client.patch(f"/api/v1/incidents/{created['id']}/status", json={"status": "CLOSED"})
        assert res.status_code == 200, res.text
        assert res.json()["data"]["status"] == "CLOSED"
        assert res.json()["data"]["reference_number"] == created["reference_number"]

        res = await client.patch(f"/api/v1/incidents/{created['id']}/status", json={"status": "DONE"})
        assert res.status_code == 422
