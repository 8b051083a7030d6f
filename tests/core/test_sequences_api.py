from httpx import AsyncClient

OTHER_TENANT = "tenant-b"


class TestSequencesApi:
    """Tests for /api/v1/sequences."""

    async def test_allocate_number(self, client: AsyncClient):
        res = await client.post("/api/v1/sequences/allocate", json={"sequence_type": "AVVIK", "year": 2025})

        assert res.status_code == 201, res.text
        body = res.json()
        assert body["success"] is True
        assert body["data"] == {"sequence_type": "AVVIK", "reference_number": "AV-2025-001"}

    async def test_allocate_sequential(self, client: AsyncClient):
        numbers = []
        for _ in range(3):
            res = await client.post(
                "/api/v1/sequences/allocate", json={"sequence_type": "FORM:SKJ", "year": 2025}
            )
            numbers.append(res.json()["data"]["reference_number"])

        assert numbers == ["SKJ-2025-001", "SKJ-2025-002", "SKJ-2025-003"]

    async def test_allocate_rejects_blank_sequence_type(self, client: AsyncClient):
        res = await client.post("/api/v1/sequences/allocate", json={"sequence_type": "   ", "year": 2025})

        assert res.status_code == 422
        assert res.json()["success"] is False

    async def test_allocate_rejects_bad_year(self, client: AsyncClient):
        res = await client.post("/api/v1/sequences/allocate", json={"sequence_type": "AVVIK", "year": 25})

        assert res.status_code == 422
        assert res.json()["errors"][0]["field"] == "year"

    async def test_tenant_header_required(self, client: AsyncClient):
        res = await client.post(
            "/api/v1/sequences/allocate",
            json={"sequence_type": "AVVIK", "year": 2025},
            headers={"X-Tenant-ID": ""},
        )

        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "X-Tenant-ID"

    async def test_preview_and_list(self, client: AsyncClient):
        await client.post("/api/v1/sequences/allocate", json={"sequence_type": "AVVIK", "year": 2025})

        res = await client.get("/api/v1/sequences/preview", params={"sequence_type": "AVVIK", "year": 2025})
        assert res.status_code == 200, res.text
        assert res.json()["data"]["reference_number"] == "AV-2025-002"

        res = await client.get("/api/v1/sequences", params={"year": 2025})
        assert res.status_code == 200, res.text
        counters = res.json()["data"]
        assert len(counters) == 1
        assert counters[0]["sequence_type"] == "AVVIK"
        assert counters[0]["period"] == 2025
        assert counters[0]["last_number"] == 1

    async def test_counters_are_tenant_scoped(self, client: AsyncClient):
        await client.post("/api/v1/sequences/allocate", json={"sequence_type": "AVVIK", "year": 2025})

        res = await client.get("/api/v1/sequences", headers={"X-Tenant-ID": OTHER_TENANT})
        assert res.json()["data"] == []

        res = await client.post(
            "/api/v1/sequences/allocate",
            json={"sequence_type": "AVVIK", "year": 2025},
            headers={"X-Tenant-ID": OTHER_TENANT},
        )
        assert res.json()["data"]["reference_number"] == "AV-2025-001"

    async def test_resolve_tag(self, client: AsyncClient):
        res = await client.get("/api/v1/sequences/resolve-tag", params={"prefix": " risk-report "})
        assert res.json()["data"]["sequence_type"] == "FORM:RISKREPORT"

        res = await client.get("/api/v1/sequences/resolve-tag")
        assert res.json()["data"]["sequence_type"] == "FORM:SKJ"

    async def test_health(self, client: AsyncClient):
        res = await client.get("/health")
        assert res.json() == {"status": "healthy"}
