"""Pricing endpoints over HTTP."""

import pytest

from carwash.tenancy import TenantContext


def _payload(catalog, **overrides):
    body = {
        "branch_id": catalog.branch_id,
        "service_id": catalog.service_id,
        "vehicle_type_id": catalog.sedan_id,
        "price": "20.00",
    }
    body.update(overrides)
    return body


class TestCreatePricing:
    @pytest.mark.asyncio
    async def test_create_returns_rule_with_names(self, client, catalog):
        resp = await client.post(
            "/api/v1/pricing", json=_payload(catalog, vehicle_brand_id=catalog.toyota_id)
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Pricing created successfully"
        assert body["data"]["org_id"] == catalog.org_id
        assert body["data"]["price"] == "20.00"
        assert body["data"]["vehicle_brand"]["name"] == "Toyota"
        assert body["data"]["vehicle_model"] is None

    @pytest.mark.asyncio
    async def test_duplicate_returns_409(self, client, catalog):
        first = await client.post("/api/v1/pricing", json=_payload(catalog))
        second = await client.post("/api/v1/pricing", json=_payload(catalog, price="30.00"))

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json() == {
            "success": False,
            "message": "A pricing rule with these parameters already exists",
        }

    @pytest.mark.asyncio
    async def test_same_tuple_on_another_branch_is_allowed(self, client, catalog):
        await client.post("/api/v1/pricing", json=_payload(catalog))
        resp = await client.post(
            "/api/v1/pricing", json=_payload(catalog, branch_id=catalog.second_branch_id)
        )
        assert resp.status_code == 201

    @pytest.mark.asyncio
    async def test_branch_of_another_org_is_forbidden(self, client, catalog):
        resp = await client.post(
            "/api/v1/pricing", json=_payload(catalog, branch_id=catalog.other_branch_id)
        )
        assert resp.status_code == 403
        assert resp.json()["message"] == "Branch does not belong to your organization"

    @pytest.mark.asyncio
    async def test_branch_bound_caller_cannot_price_sibling_branch(
        self, client, catalog, tenant_state
    ):
        tenant_state["tenant"] = TenantContext(org_id=catalog.org_id, branch_id=catalog.branch_id)

        resp = await client.post(
            "/api/v1/pricing", json=_payload(catalog, branch_id=catalog.second_branch_id)
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_model_without_brand_is_rejected(self, client, catalog):
        resp = await client.post(
            "/api/v1/pricing", json=_payload(catalog, vehicle_model_id=catalog.camry_id)
        )
        assert resp.status_code == 422
        assert resp.json()["success"] is False

    @pytest.mark.asyncio
    async def test_model_of_another_brand_is_rejected(self, client, catalog):
        resp = await client.post(
            "/api/v1/pricing",
            json=_payload(
                catalog, vehicle_brand_id=catalog.honda_id, vehicle_model_id=catalog.camry_id
            ),
        )
        assert resp.status_code == 422
        assert "vehicle_model_id" in resp.json()["errors"]

    @pytest.mark.asyncio
    async def test_brand_of_another_type_is_rejected(self, client, catalog):
        resp = await client.post(
            "/api/v1/pricing",
            json=_payload(
                catalog, vehicle_type_id=catalog.suv_id, vehicle_brand_id=catalog.toyota_id
            ),
        )
        assert resp.status_code == 422
        assert "vehicle_brand_id" in resp.json()["errors"]

    @pytest.mark.asyncio
    async def test_negative_price_is_rejected(self, client, catalog):
        resp = await client.post("/api/v1/pricing", json=_payload(catalog, price="-1"))
        assert resp.status_code == 422


class TestLookup:
    @pytest.mark.asyncio
    async def test_brand_level_match(self, client, catalog, add_rule):
        await add_rule("20.00")
        await add_rule("25.00", brand_id=catalog.toyota_id)

        resp = await client.get(
            "/api/v1/pricing/lookup",
            params={
                "branch_id": catalog.branch_id,
                "service_id": catalog.service_id,
                "vehicle_type_id": catalog.sedan_id,
                "vehicle_brand_id": catalog.toyota_id,
            },
        )

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["price"] == "25.00"
        assert data["match_type"] == "brand_level"
        assert data["pricing"]["vehicle_brand_id"] == catalog.toyota_id

    @pytest.mark.asyncio
    async def test_no_rule_returns_404(self, client, catalog):
        resp = await client.get(
            "/api/v1/pricing/lookup",
            params={
                "branch_id": catalog.branch_id,
                "service_id": catalog.service_id,
                "vehicle_type_id": catalog.suv_id,
                "vehicle_brand_id": catalog.toyota_id,
                "vehicle_model_id": catalog.camry_id,
            },
        )
        assert resp.status_code == 404
        assert resp.json()["message"] == "No pricing found for the specified parameters"

    @pytest.mark.asyncio
    async def test_deleted_service_stops_resolving(self, client, catalog, add_rule):
        await add_rule("20.00")
        params = {
            "branch_id": catalog.branch_id,
            "service_id": catalog.service_id,
            "vehicle_type_id": catalog.sedan_id,
        }
        assert (await client.get("/api/v1/pricing/lookup", params=params)).status_code == 200

        await client.delete(f"/api/v1/services/{catalog.service_id}")

        resp = await client.get("/api/v1/pricing/lookup", params=params)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_lookup_outside_tenant_is_forbidden(self, client, catalog):
        resp = await client.get(
            "/api/v1/pricing/lookup",
            params={
                "branch_id": catalog.other_branch_id,
                "service_id": catalog.service_id,
                "vehicle_type_id": catalog.sedan_id,
            },
        )
        assert resp.status_code == 403


class TestManagePricing:
    @pytest.mark.asyncio
    async def test_list_requires_a_branch_for_org_wide_callers(self, client):
        resp = await client.get("/api/v1/pricing")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Branch ID is required"

    @pytest.mark.asyncio
    async def test_list_defaults_to_callers_branch(self, client, catalog, add_rule, tenant_state):
        await add_rule("20.00")
        await add_rule("22.00", branch_id=catalog.second_branch_id)
        tenant_state["tenant"] = TenantContext(org_id=catalog.org_id, branch_id=catalog.branch_id)

        resp = await client.get("/api/v1/pricing")

        body = resp.json()
        assert resp.status_code == 200
        assert [r["price"] for r in body["data"]] == ["20.00"]
        assert body["meta"] == {"current_page": 1, "last_page": 1, "per_page": 15, "total": 1}

    @pytest.mark.asyncio
    async def test_by_service(self, client, catalog, add_rule):
        await add_rule("20.00")
        await add_rule("25.00", brand_id=catalog.toyota_id)
        await add_rule("26.00", brand_id=catalog.honda_id, is_active=False)

        resp = await client.get(
            f"/api/v1/pricing/by-service/{catalog.service_id}",
            params={"branch_id": catalog.branch_id},
        )

        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 2

    @pytest.mark.asyncio
    async def test_show_missing_rule(self, client):
        resp = await client.get("/api/v1/pricing/999")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Pricing not found"

    @pytest.mark.asyncio
    async def test_show_rule_of_another_org(self, client, catalog, add_rule):
        rule_id = await add_rule("20.00", org_id=catalog.other_org_id, branch_id=catalog.other_branch_id)

        resp = await client.get(f"/api/v1/pricing/{rule_id}")
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_update_price(self, client, add_rule):
        rule_id = await add_rule("20.00")

        resp = await client.put(f"/api/v1/pricing/{rule_id}", json={"price": "21.50"})

        assert resp.status_code == 200
        assert resp.json()["data"]["price"] == "21.50"

    @pytest.mark.asyncio
    async def test_update_into_duplicate_returns_409(self, client, catalog, add_rule):
        await add_rule("20.00")
        rule_id = await add_rule("25.00", brand_id=catalog.toyota_id)

        resp = await client.put(f"/api/v1/pricing/{rule_id}", json={"vehicle_brand_id": None})
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_then_recreate(self, client, catalog, add_rule):
        rule_id = await add_rule("20.00")

        deleted = await client.delete(f"/api/v1/pricing/{rule_id}")
        assert deleted.status_code == 200
        assert (await client.get(f"/api/v1/pricing/{rule_id}")).status_code == 404

        recreated = await client.post("/api/v1/pricing", json=_payload(catalog))
        assert recreated.status_code == 201
