"""Pricing rule repository — storage and the duplicate guard."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carwash.errors import ConflictError
from carwash.models.pricing import PricingRule

logger = structlog.get_logger()

DUPLICATE_MESSAGE = "A pricing rule with these parameters already exists"
UNIQUE_INDEX = "uq_vehicle_service_pricing_rule"

DETAIL_OPTIONS = (
    selectinload(PricingRule.service),
    selectinload(PricingRule.vehicle_type),
    selectinload(PricingRule.vehicle_brand),
    selectinload(PricingRule.vehicle_model),
)


class PricingRuleRepository:
    """Reads and writes pricing rules; soft-deleted rows are invisible."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, rule_id: int, with_details: bool = False) -> Optional[PricingRule]:
        stmt = select(PricingRule).where(PricingRule.id == rule_id)
        if with_details:
            stmt = stmt.options(*DETAIL_OPTIONS).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    def branch_query(self, branch_id: int, service_id: Optional[int] = None) -> Select:
        """Select for every rule of a branch, ordered by service."""
        stmt = select(PricingRule).where(PricingRule.branch_id == branch_id)
        if service_id is not None:
            stmt = stmt.where(PricingRule.service_id == service_id)
        return stmt.options(*DETAIL_OPTIONS).order_by(PricingRule.service_id, PricingRule.id)

    async def list_active_for_service(self, branch_id: int, service_id: int) -> list[PricingRule]:
        result = await self.db.execute(
            select(PricingRule)
            .where(
                PricingRule.branch_id == branch_id,
                PricingRule.service_id == service_id,
                PricingRule.is_active == True,  # noqa: E712
            )
            .options(*DETAIL_OPTIONS)
            .order_by(PricingRule.vehicle_type_id, PricingRule.id)
        )
        return list(result.scalars().all())

    async def is_duplicate(
        self,
        branch_id: int,
        service_id: int,
        vehicle_type_id: int,
        vehicle_brand_id: Optional[int] = None,
        vehicle_model_id: Optional[int] = None,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """Check whether a live rule already covers this exact tuple.

        Missing brand/model match only rules where that column IS NULL,
        never "any value".
        """
        stmt = select(PricingRule.id).where(
            PricingRule.branch_id == branch_id,
            PricingRule.service_id == service_id,
            PricingRule.vehicle_type_id == vehicle_type_id,
        )

        if vehicle_brand_id is not None:
            stmt = stmt.where(PricingRule.vehicle_brand_id == vehicle_brand_id)
        else:
            stmt = stmt.where(PricingRule.vehicle_brand_id.is_(None))

        if vehicle_model_id is not None:
            stmt = stmt.where(PricingRule.vehicle_model_id == vehicle_model_id)
        else:
            stmt = stmt.where(PricingRule.vehicle_model_id.is_(None))

        if exclude_id is not None:
            stmt = stmt.where(PricingRule.id != exclude_id)

        result = await self.db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def create(self, org_id: int, data: dict[str, Any]) -> PricingRule:
        """Insert a rule after the duplicate guard passes.

        Raises:
            ConflictError: an equivalent live rule exists, either found by
                the guard or reported by the unique index
        """
        await self._guard(data)

        rule = PricingRule(org_id=org_id, **data)
        self.db.add(rule)
        await self._flush(rule_id=None, data=data)

        logger.info(
            "pricing_rule_created",
            rule_id=rule.id,
            branch_id=rule.branch_id,
            service_id=rule.service_id,
        )
        return rule

    async def update(self, rule: PricingRule, data: dict[str, Any]) -> PricingRule:
        """Apply changes, re-running the guard against the merged tuple."""
        merged = {**self._tuple_of(rule), **data}
        await self._guard(merged, exclude_id=rule.id)

        for field, value in data.items():
            setattr(rule, field, value)
        await self._flush(rule_id=rule.id, data=merged)

        logger.info("pricing_rule_updated", rule_id=rule.id)
        return rule

    async def soft_delete(self, rule: PricingRule) -> None:
        rule.deleted_at = datetime.now(timezone.utc)
        await self.db.flush()
        logger.info("pricing_rule_deleted", rule_id=rule.id)

    @staticmethod
    def _tuple_of(rule: PricingRule) -> dict[str, Any]:
        return {
            "branch_id": rule.branch_id,
            "service_id": rule.service_id,
            "vehicle_type_id": rule.vehicle_type_id,
            "vehicle_brand_id": rule.vehicle_brand_id,
            "vehicle_model_id": rule.vehicle_model_id,
        }

    async def _guard(self, data: dict[str, Any], exclude_id: Optional[int] = None) -> None:
        if await self.is_duplicate(
            data["branch_id"],
            data["service_id"],
            data["vehicle_type_id"],
            data.get("vehicle_brand_id"),
            data.get("vehicle_model_id"),
            exclude_id=exclude_id,
        ):
            logger.info("pricing_rule_conflict", exclude_id=exclude_id, **self._log_tuple(data))
            raise ConflictError(DUPLICATE_MESSAGE)

    async def _flush(self, rule_id: Optional[int], data: dict[str, Any]) -> None:
        # A concurrent writer can slip past the guard; the unique index catches it.
        # Any other integrity failure is not a duplicate and propagates.
        try:
            await self.db.flush()
        except IntegrityError as exc:
            await self.db.rollback()
            if UNIQUE_INDEX not in str(exc.orig):
                raise
            logger.warning(
                "pricing_rule_conflict_on_write",
                rule_id=rule_id,
                error=str(exc.orig),
                **self._log_tuple(data),
            )
            raise ConflictError(DUPLICATE_MESSAGE) from exc

    @staticmethod
    def _log_tuple(data: dict[str, Any]) -> dict[str, Any]:
        return {
            "branch_id": data.get("branch_id"),
            "service_id": data.get("service_id"),
            "vehicle_type_id": data.get("vehicle_type_id"),
            "brand_id": data.get("vehicle_brand_id"),
            "model_id": data.get("vehicle_model_id"),
        }
