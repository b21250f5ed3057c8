"""Customers and their vehicles."""

import pytest

from carwash.tenancy import TenantContext


async def _create_customer(client, **overrides):
    body = {"name": "Alex Moreno", "phone": "+15550001", "email": "alex@example.com"}
    body.update(overrides)
    return await client.post("/api/v1/customers", json=body)


class TestCustomers:
    @pytest.mark.asyncio
    async def test_create_takes_tenant_org_and_branch(self, client, catalog, tenant_state):
        tenant_state["tenant"] = TenantContext(org_id=catalog.org_id, branch_id=catalog.branch_id)

        resp = await _create_customer(client)

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["org_id"] == catalog.org_id
        assert data["branch_id"] == catalog.branch_id

    @pytest.mark.asyncio
    async def test_phone_unique_per_org(self, client, catalog, tenant_state):
        assert (await _create_customer(client)).status_code == 201

        again = await _create_customer(client, name="Someone Else")
        assert again.status_code == 409

        tenant_state["tenant"] = TenantContext(org_id=catalog.other_org_id)
        assert (await _create_customer(client)).status_code == 201

    @pytest.mark.asyncio
    async def test_phone_reusable_after_delete(self, client):
        customer_id = (await _create_customer(client)).json()["data"]["id"]

        await client.delete(f"/api/v1/customers/{customer_id}")

        assert (await _create_customer(client)).status_code == 201

    @pytest.mark.asyncio
    async def test_search(self, client):
        await _create_customer(client)
        await _create_customer(client, name="Jordan Park", phone="+15550002", email=None)

        by_name = await client.get("/api/v1/customers", params={"search": "jordan"})
        assert [c["name"] for c in by_name.json()["data"]] == ["Jordan Park"]

        by_phone = await client.get("/api/v1/customers/search", params={"phone": "+15550001"})
        assert by_phone.json()["data"]["name"] == "Alex Moreno"

        missing = await client.get("/api/v1/customers/search", params={"phone": "+19999999"})
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_other_org_customer_is_forbidden(self, client, catalog, tenant_state):
        customer_id = (await _create_customer(client)).json()["data"]["id"]
        tenant_state["tenant"] = TenantContext(org_id=catalog.other_org_id)

        assert (await client.get(f"/api/v1/customers/{customer_id}")).status_code == 403


class TestCustomerVehicles:
    @pytest.mark.asyncio
    async def test_add_and_show_with_customer(self, client, catalog):
        customer_id = (await _create_customer(client)).json()["data"]["id"]

        added = await client.post(
            f"/api/v1/customers/{customer_id}/vehicles",
            json={
                "vehicle_type_id": catalog.sedan_id,
                "vehicle_brand_id": catalog.toyota_id,
                "vehicle_model_id": catalog.camry_id,
                "registration_number": "ABC-123",
            },
        )
        assert added.status_code == 201

        detail = await client.get(f"/api/v1/customers/{customer_id}")
        vehicles = detail.json()["data"]["vehicles"]
        assert [v["registration_number"] for v in vehicles] == ["ABC-123"]

    @pytest.mark.asyncio
    async def test_model_must_match_brand(self, client, catalog):
        customer_id = (await _create_customer(client)).json()["data"]["id"]

        resp = await client.post(
            f"/api/v1/customers/{customer_id}/vehicles",
            json={
                "vehicle_type_id": catalog.sedan_id,
                "vehicle_brand_id": catalog.honda_id,
                "vehicle_model_id": catalog.camry_id,
            },
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_deleted_vehicle_leaves_customer_detail(self, client, catalog):
        customer_id = (await _create_customer(client)).json()["data"]["id"]
        vehicle = await client.post(
            f"/api/v1/customers/{customer_id}/vehicles",
            json={"vehicle_type_id": catalog.sedan_id, "color": "red"},
        )
        vehicle_id = vehicle.json()["data"]["id"]

        updated = await client.put(
            f"/api/v1/customers/{customer_id}/vehicles/{vehicle_id}", json={"color": "blue"}
        )
        assert updated.json()["data"]["color"] == "blue"

        await client.delete(f"/api/v1/customers/{customer_id}/vehicles/{vehicle_id}")

        detail = await client.get(f"/api/v1/customers/{customer_id}")
        assert detail.json()["data"]["vehicles"] == []
        gone = await client.get(f"/api/v1/customers/{customer_id}/vehicles/{vehicle_id}")
        assert gone.status_code == 404
