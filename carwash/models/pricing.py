"""Vehicle service pricing — one price per branch/service/vehicle scope."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carwash.models.base import Base, BigIntId, IntIdMixin, SoftDeleteMixin, TimestampMixin


class PricingRule(Base, IntIdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "vehicle_service_pricing"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_vehicle_service_pricing_price"),)

    # Denormalized from the branch so the tenant filter applies directly
    org_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    branch_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Vehicle scope (NULL brand/model = wider rule)
    vehicle_type_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("vehicle_types.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vehicle_brand_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("vehicle_brands.id", ondelete="CASCADE"), nullable=True, index=True
    )
    vehicle_model_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("vehicle_models.id", ondelete="CASCADE"), nullable=True, index=True
    )

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    branch = relationship("Branch")
    service = relationship("Service")
    vehicle_type = relationship("VehicleType")
    vehicle_brand = relationship("VehicleBrand")
    vehicle_model = relationship("VehicleModel")


# One live rule per (branch, service, type, brand, model). NULL brand/model
# must collide with each other, so the index is built over coalesce(..., 0).
Index(
    "uq_vehicle_service_pricing_rule",
    PricingRule.branch_id,
    PricingRule.service_id,
    PricingRule.vehicle_type_id,
    func.coalesce(PricingRule.vehicle_brand_id, 0),
    func.coalesce(PricingRule.vehicle_model_id, 0),
    unique=True,
    postgresql_where=PricingRule.deleted_at.is_(None),
    sqlite_where=PricingRule.deleted_at.is_(None),
)
