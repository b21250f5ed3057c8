"""Pricing Engine — resolves the single applicable price for a vehicle."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.models.pricing import PricingRule
from carwash.pricing.tiers import MatchTier, MatchType, applicable_tiers
from carwash.repositories.pricing import DETAIL_OPTIONS

logger = structlog.get_logger()


@dataclass(frozen=True)
class PriceMatch:
    """A resolved rule and the tier it matched on."""

    rule: PricingRule
    match_type: MatchType

    @property
    def price(self) -> Decimal:
        return self.rule.price


class PricingEngine:
    """Finds the most specific active rule with tiered fallback."""

    async def lookup(
        self,
        db: AsyncSession,
        branch_id: int,
        service_id: int,
        vehicle_type_id: int,
        vehicle_brand_id: Optional[int] = None,
        vehicle_model_id: Optional[int] = None,
    ) -> Optional[PriceMatch]:
        """Resolve the price rule for a vehicle at a branch.

        Tier order:
        1. exact_model: brand + model both supplied and matched
        2. brand_level: brand matched, rule has no model
        3. type_level: rule has neither brand nor model

        Branch, service and vehicle type must match exactly; there is
        no fallback across them. Rules of a deleted service never match.

        Args:
            db: Database session
            branch_id: Branch the service is performed at
            service_id: Service being priced
            vehicle_type_id: Vehicle type (required)
            vehicle_brand_id: Vehicle brand, if known
            vehicle_model_id: Vehicle model, if known

        Returns:
            PriceMatch for the first tier with a rule, or None
        """
        for tier in applicable_tiers(vehicle_brand_id, vehicle_model_id):
            rule = await self._find_in_tier(
                db, tier, branch_id, service_id, vehicle_type_id,
                vehicle_brand_id, vehicle_model_id,
            )
            if rule is not None:
                logger.info(
                    "price_lookup_matched",
                    branch_id=branch_id,
                    service_id=service_id,
                    vehicle_type_id=vehicle_type_id,
                    brand_id=vehicle_brand_id,
                    model_id=vehicle_model_id,
                    rule_id=rule.id,
                    match_type=tier.match_type.value,
                    price=str(rule.price),
                )
                return PriceMatch(rule=rule, match_type=tier.match_type)

        logger.info(
            "price_lookup_not_found",
            branch_id=branch_id,
            service_id=service_id,
            vehicle_type_id=vehicle_type_id,
            brand_id=vehicle_brand_id,
            model_id=vehicle_model_id,
        )
        return None

    async def _find_in_tier(
        self,
        db: AsyncSession,
        tier: MatchTier,
        branch_id: int,
        service_id: int,
        vehicle_type_id: int,
        vehicle_brand_id: Optional[int],
        vehicle_model_id: Optional[int],
    ) -> Optional[PricingRule]:
        # Inner join so rules of a deleted service never resolve.
        stmt = (
            select(PricingRule)
            .join(PricingRule.service)
            .where(
                PricingRule.branch_id == branch_id,
                PricingRule.service_id == service_id,
                PricingRule.vehicle_type_id == vehicle_type_id,
                PricingRule.is_active == True,  # noqa: E712
                *tier.criteria(vehicle_brand_id, vehicle_model_id),
            )
            .options(*DETAIL_OPTIONS)
            .order_by(PricingRule.id)
            .limit(1)
        )
        result = await db.execute(stmt)
        return result.scalars().first()
