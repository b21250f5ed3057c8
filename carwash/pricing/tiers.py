"""Match tiers for price resolution, most specific first.

Each tier says when it is worth querying (given what the caller knows
about the vehicle) and which brand/model criteria a rule must meet.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from sqlalchemy import ColumnElement

from carwash.models.pricing import PricingRule


class MatchType(str, Enum):
    EXACT_MODEL = "exact_model"
    BRAND_LEVEL = "brand_level"
    TYPE_LEVEL = "type_level"


@dataclass(frozen=True)
class MatchTier:
    match_type: MatchType
    applies: Callable[[Optional[int], Optional[int]], bool]
    criteria: Callable[[Optional[int], Optional[int]], list[ColumnElement[bool]]]


def _exact_model_criteria(brand_id: Optional[int], model_id: Optional[int]) -> list:
    return [
        PricingRule.vehicle_brand_id == brand_id,
        PricingRule.vehicle_model_id == model_id,
    ]


def _brand_level_criteria(brand_id: Optional[int], model_id: Optional[int]) -> list:
    return [
        PricingRule.vehicle_brand_id == brand_id,
        PricingRule.vehicle_model_id.is_(None),
    ]


def _type_level_criteria(brand_id: Optional[int], model_id: Optional[int]) -> list:
    return [
        PricingRule.vehicle_brand_id.is_(None),
        PricingRule.vehicle_model_id.is_(None),
    ]


MATCH_TIERS: tuple[MatchTier, ...] = (
    MatchTier(
        MatchType.EXACT_MODEL,
        applies=lambda brand_id, model_id: brand_id is not None and model_id is not None,
        criteria=_exact_model_criteria,
    ),
    MatchTier(
        MatchType.BRAND_LEVEL,
        applies=lambda brand_id, model_id: brand_id is not None,
        criteria=_brand_level_criteria,
    ),
    MatchTier(
        MatchType.TYPE_LEVEL,
        applies=lambda brand_id, model_id: True,
        criteria=_type_level_criteria,
    ),
)


def applicable_tiers(
    vehicle_brand_id: Optional[int], vehicle_model_id: Optional[int]
) -> list[MatchTier]:
    """Tiers worth querying for this vehicle, in evaluation order."""
    return [t for t in MATCH_TIERS if t.applies(vehicle_brand_id, vehicle_model_id)]
