"""Duplicate guard for pricing rules: pre-check plus the unique index."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError

from carwash.errors import ConflictError
from carwash.repositories.pricing import PricingRuleRepository


def _rule_fields(catalog, brand_id=None, model_id=None, price="20.00"):
    return {
        "branch_id": catalog.branch_id,
        "service_id": catalog.service_id,
        "vehicle_type_id": catalog.sedan_id,
        "vehicle_brand_id": brand_id,
        "vehicle_model_id": model_id,
        "price": Decimal(price),
        "is_active": True,
    }


class TestIsDuplicate:
    @pytest.mark.asyncio
    async def test_null_brand_matches_only_null_brand(self, db, catalog, add_rule):
        await add_rule("25.00", brand_id=catalog.toyota_id)
        repo = PricingRuleRepository(db)

        assert not await repo.is_duplicate(catalog.branch_id, catalog.service_id, catalog.sedan_id)
        assert await repo.is_duplicate(
            catalog.branch_id, catalog.service_id, catalog.sedan_id, catalog.toyota_id
        )

    @pytest.mark.asyncio
    async def test_brand_rule_does_not_cover_model_rule(self, db, catalog, add_rule):
        await add_rule("25.00", brand_id=catalog.toyota_id)
        repo = PricingRuleRepository(db)

        assert not await repo.is_duplicate(
            catalog.branch_id, catalog.service_id, catalog.sedan_id,
            catalog.toyota_id, catalog.camry_id,
        )

    @pytest.mark.asyncio
    async def test_exclude_id_ignores_the_rule_itself(self, db, catalog, add_rule):
        rule_id = await add_rule("20.00")
        repo = PricingRuleRepository(db)

        assert not await repo.is_duplicate(
            catalog.branch_id, catalog.service_id, catalog.sedan_id, exclude_id=rule_id
        )


class TestCreate:
    @pytest.mark.asyncio
    async def test_identical_type_level_rule_conflicts(self, db, catalog, add_rule):
        await add_rule("20.00")
        repo = PricingRuleRepository(db)

        with pytest.raises(ConflictError):
            await repo.create(catalog.org_id, _rule_fields(catalog, price="22.00"))

    @pytest.mark.asyncio
    async def test_deleted_rule_does_not_block(self, db, catalog, add_rule):
        await add_rule("20.00", deleted_at=datetime.now(timezone.utc))
        repo = PricingRuleRepository(db)

        rule = await repo.create(catalog.org_id, _rule_fields(catalog))
        await db.commit()

        assert rule.id is not None

    @pytest.mark.asyncio
    async def test_unique_index_backstops_a_missed_check(self, db, catalog, add_rule):
        """Two writers racing past the pre-check still end in a conflict."""
        await add_rule("20.00")
        repo = PricingRuleRepository(db)
        repo.is_duplicate = AsyncMock(return_value=False)

        with pytest.raises(ConflictError):
            await repo.create(catalog.org_id, _rule_fields(catalog))

    @pytest.mark.asyncio
    async def test_other_integrity_failures_are_not_conflicts(self, db, catalog):
        """A check constraint violation surfaces as a storage error, not a 409."""
        repo = PricingRuleRepository(db)

        with pytest.raises(IntegrityError):
            await repo.create(catalog.org_id, _rule_fields(catalog, price="-1.00"))

    @pytest.mark.asyncio
    async def test_null_columns_collide_in_the_index(self, catalog, add_rule):
        await add_rule("20.00")

        with pytest.raises(IntegrityError):
            await add_rule("21.00")


class TestUpdate:
    @pytest.mark.asyncio
    async def test_moving_onto_an_existing_tuple_conflicts(self, db, catalog, add_rule):
        await add_rule("20.00")
        brand_rule_id = await add_rule("25.00", brand_id=catalog.toyota_id)
        repo = PricingRuleRepository(db)
        rule = await repo.get(brand_rule_id)

        with pytest.raises(ConflictError):
            await repo.update(rule, {"vehicle_brand_id": None})

    @pytest.mark.asyncio
    async def test_price_only_update_is_not_a_conflict(self, db, catalog, add_rule):
        rule_id = await add_rule("20.00")
        repo = PricingRuleRepository(db)
        rule = await repo.get(rule_id)

        await repo.update(rule, {"price": Decimal("24.00")})
        await db.commit()

        refreshed = await repo.get(rule_id, with_details=True)
        assert refreshed.price == Decimal("24.00")

    @pytest.mark.asyncio
    async def test_soft_delete_hides_rule(self, db, catalog, add_rule):
        rule_id = await add_rule("20.00")
        repo = PricingRuleRepository(db)

        await repo.soft_delete(await repo.get(rule_id))
        await db.commit()

        assert await repo.get(rule_id) is None
        assert not await repo.is_duplicate(catalog.branch_id, catalog.service_id, catalog.sedan_id)
