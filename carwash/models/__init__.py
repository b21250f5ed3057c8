"""SQLAlchemy ORM models."""

from carwash.models.base import Base
from carwash.models.organization import Branch, Organization
from carwash.models.user import User
from carwash.models.vehicle import VehicleBrand, VehicleModel, VehicleType
from carwash.models.service import Service
from carwash.models.customer import Customer, CustomerVehicle
from carwash.models.pricing import PricingRule

__all__ = [
    "Base",
    "Organization",
    "Branch",
    "User",
    "VehicleType",
    "VehicleBrand",
    "VehicleModel",
    "Service",
    "Customer",
    "CustomerVehicle",
    "PricingRule",
]
