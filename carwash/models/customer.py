"""Customers and the vehicles they bring in."""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carwash.models.base import Base, BigIntId, IntIdMixin, SoftDeleteMixin, TimestampMixin


class Customer(Base, IntIdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "customers"

    org_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    branch_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # Optional login account for the customer portal
    user_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    vehicles = relationship("CustomerVehicle", back_populates="customer")


# One live customer per phone number within an organization
Index(
    "uq_customers_org_phone",
    Customer.org_id,
    Customer.phone,
    unique=True,
    postgresql_where=Customer.deleted_at.is_(None),
    sqlite_where=Customer.deleted_at.is_(None),
)


class CustomerVehicle(Base, IntIdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "customer_vehicles"

    org_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    branch_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True
    )
    customer_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Vehicle hierarchy, as keyed by the price lookup
    vehicle_type_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("vehicle_types.id", ondelete="SET NULL"), nullable=True, index=True
    )
    vehicle_brand_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("vehicle_brands.id", ondelete="SET NULL"), nullable=True, index=True
    )
    vehicle_model_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("vehicle_models.id", ondelete="SET NULL"), nullable=True, index=True
    )

    registration_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    customer = relationship("Customer", back_populates="vehicles")
