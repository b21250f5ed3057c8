"""Staff and customer login accounts."""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carwash.models.base import Base, BigIntId, IntIdMixin, SoftDeleteMixin, TimestampMixin

ROLE_SUPER_ADMIN = "super_admin"
ROLE_ORG_ADMIN = "org_admin"
ROLE_BRANCH_ADMIN = "branch_admin"
ROLE_STAFF = "staff"
ROLE_CUSTOMER = "customer"


class User(Base, IntIdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "users"

    # NULL org_id: platform-level account (super admin)
    org_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # NULL branch_id: organization-wide account
    branch_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(30), default=ROLE_STAFF, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    organization = relationship("Organization")
    branch = relationship("Branch")
