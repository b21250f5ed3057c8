"""Vehicle catalog — types, brands and models."""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carwash.models.base import Base, BigIntId, IntIdMixin, SoftDeleteMixin, TimestampMixin


class VehicleType(Base, IntIdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "vehicle_types"

    org_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    branch_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    brands = relationship("VehicleBrand", back_populates="vehicle_type")


class VehicleBrand(Base, IntIdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "vehicle_brands"

    org_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    branch_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True
    )
    vehicle_type_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("vehicle_types.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    vehicle_type = relationship("VehicleType", back_populates="brands")
    models = relationship("VehicleModel", back_populates="brand")


class VehicleModel(Base, IntIdMixin, TimestampMixin, SoftDeleteMixin):
    """Models carry no tenant columns; they are owned through their brand."""

    __tablename__ = "vehicle_models"

    vehicle_brand_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("vehicle_brands.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    brand = relationship("VehicleBrand", back_populates="models")
