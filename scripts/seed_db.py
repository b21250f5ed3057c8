"""Seed database with a demo organization, vehicle catalog, services and prices."""

import asyncio
from decimal import Decimal

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from carwash.auth.passwords import hash_password
from carwash.config import settings
from carwash.models import (
    Base,
    Branch,
    Organization,
    PricingRule,
    Service,
    User,
    VehicleBrand,
    VehicleModel,
    VehicleType,
)
from carwash.models.user import ROLE_ORG_ADMIN, ROLE_SUPER_ADMIN

ADMIN_PASSWORD = "password123"

VEHICLE_CATALOG = {
    "Sedan": {"Toyota": ["Corolla", "Camry"], "Honda": ["Civic", "Accord"]},
    "SUV": {"Toyota": ["RAV4", "Land Cruiser"], "Ford": ["Explorer"]},
    "Motorcycle": {"Yamaha": ["MT-07"]},
}

SERVICES = [
    {"name": "Exterior Wash", "base_price": Decimal("15.00"), "duration_minutes": 30},
    {"name": "Full Detail", "base_price": Decimal("80.00"), "duration_minutes": 180},
    {"name": "Interior Cleaning", "base_price": Decimal("35.00"), "duration_minutes": 60},
]

# (service, vehicle type, brand or None, model or None, price)
PRICES = [
    ("Exterior Wash", "Sedan", None, None, "20.00"),
    ("Exterior Wash", "Sedan", "Toyota", None, "25.00"),
    ("Exterior Wash", "Sedan", "Toyota", "Camry", "30.00"),
    ("Exterior Wash", "SUV", None, None, "30.00"),
    ("Full Detail", "SUV", "Toyota", "Land Cruiser", "150.00"),
]


async def seed():
    """Seed the database with demo data."""
    engine = create_async_engine(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession)

    async with session_factory() as session:
        session.add(User(
            name="Platform Admin",
            email="superadmin@example.com",
            password_hash=hash_password(ADMIN_PASSWORD),
            role=ROLE_SUPER_ADMIN,
        ))

        org = Organization(name="Demo Car Wash", email="info@democarwash.example")
        session.add(org)
        await session.flush()
        print(f"  + Organization: {org.name}")

        branch = Branch(org_id=org.id, name="Main Branch", code="MAIN")
        session.add(branch)
        await session.flush()
        print(f"  + Branch: {branch.name}")

        session.add(User(
            org_id=org.id,
            name="Org Admin",
            email="admin@democarwash.example",
            password_hash=hash_password(ADMIN_PASSWORD),
            role=ROLE_ORG_ADMIN,
        ))

        # Seed vehicle catalog
        type_map, brand_map, model_map = {}, {}, {}
        for type_name, brands in VEHICLE_CATALOG.items():
            vehicle_type = VehicleType(org_id=org.id, name=type_name)
            session.add(vehicle_type)
            await session.flush()
            type_map[type_name] = vehicle_type.id
            print(f"  + Vehicle type: {type_name}")

            for brand_name, models in brands.items():
                brand = VehicleBrand(
                    org_id=org.id, vehicle_type_id=vehicle_type.id, name=brand_name
                )
                session.add(brand)
                await session.flush()
                brand_map[(type_name, brand_name)] = brand.id

                for model_name in models:
                    model = VehicleModel(vehicle_brand_id=brand.id, name=model_name)
                    session.add(model)
                    await session.flush()
                    model_map[(type_name, brand_name, model_name)] = model.id

        # Seed services
        service_map = {}
        for svc_data in SERVICES:
            service = Service(org_id=org.id, **svc_data)
            session.add(service)
            await session.flush()
            service_map[svc_data["name"]] = service.id
            print(f"  + Service: {svc_data['name']}")

        # Seed pricing rules
        for service_name, type_name, brand_name, model_name, price in PRICES:
            session.add(PricingRule(
                org_id=org.id,
                branch_id=branch.id,
                service_id=service_map[service_name],
                vehicle_type_id=type_map[type_name],
                vehicle_brand_id=brand_map.get((type_name, brand_name)),
                vehicle_model_id=model_map.get((type_name, brand_name, model_name)),
                price=Decimal(price),
            ))
            print(f"  + Price: {service_name} / {type_name} {brand_name or ''} {model_name or ''}")

        await session.commit()

    await engine.dispose()
    print("\nSeed completed!")


if __name__ == "__main__":
    asyncio.run(seed())
