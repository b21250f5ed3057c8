"""Test fixtures and configuration."""

from dataclasses import dataclass
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from carwash.auth.dependencies import get_tenant
from carwash.database import get_db
from carwash.main import app
from carwash.models import (
    Base,
    Branch,
    Organization,
    PricingRule,
    Service,
    VehicleBrand,
    VehicleModel,
    VehicleType,
)
from carwash.redis_client import get_redis
from carwash.tenancy import TenantContext


@dataclass
class Catalog:
    """Ids of the rows every integration test starts from."""

    org_id: int
    branch_id: int
    second_branch_id: int
    other_org_id: int
    other_branch_id: int
    service_id: int
    sedan_id: int
    suv_id: int
    toyota_id: int
    honda_id: int
    camry_id: int
    corolla_id: int
    civic_id: int


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    return redis


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def catalog(session_factory) -> Catalog:
    """Two organizations, three branches and a small vehicle catalog."""
    async with session_factory() as session:
        org = Organization(name="Shine Car Wash")
        other_org = Organization(name="Rival Wash")
        session.add_all([org, other_org])
        await session.flush()

        branch = Branch(org_id=org.id, name="Downtown")
        second_branch = Branch(org_id=org.id, name="Airport")
        other_branch = Branch(org_id=other_org.id, name="Rival Central")
        session.add_all([branch, second_branch, other_branch])

        sedan = VehicleType(org_id=org.id, name="Sedan")
        suv = VehicleType(org_id=org.id, name="SUV")
        session.add_all([sedan, suv])
        await session.flush()

        toyota = VehicleBrand(org_id=org.id, vehicle_type_id=sedan.id, name="Toyota")
        honda = VehicleBrand(org_id=org.id, vehicle_type_id=sedan.id, name="Honda")
        session.add_all([toyota, honda])
        await session.flush()

        camry = VehicleModel(vehicle_brand_id=toyota.id, name="Camry")
        corolla = VehicleModel(vehicle_brand_id=toyota.id, name="Corolla")
        civic = VehicleModel(vehicle_brand_id=honda.id, name="Civic")
        service = Service(org_id=org.id, name="Exterior Wash", base_price=Decimal("15.00"))
        session.add_all([camry, corolla, civic, service])
        await session.commit()

        return Catalog(
            org_id=org.id,
            branch_id=branch.id,
            second_branch_id=second_branch.id,
            other_org_id=other_org.id,
            other_branch_id=other_branch.id,
            service_id=service.id,
            sedan_id=sedan.id,
            suv_id=suv.id,
            toyota_id=toyota.id,
            honda_id=honda.id,
            camry_id=camry.id,
            corolla_id=corolla.id,
            civic_id=civic.id,
        )


@pytest.fixture
def add_rule(session_factory, catalog):
    """Insert a pricing rule directly, bypassing the duplicate guard."""

    async def _add(price: str, brand_id=None, model_id=None, **overrides) -> int:
        fields = dict(
            org_id=catalog.org_id,
            branch_id=catalog.branch_id,
            service_id=catalog.service_id,
            vehicle_type_id=catalog.sedan_id,
            vehicle_brand_id=brand_id,
            vehicle_model_id=model_id,
            price=Decimal(price),
        )
        fields.update(overrides)
        async with session_factory() as session:
            rule = PricingRule(**fields)
            session.add(rule)
            await session.commit()
            return rule.id

    return _add


@pytest.fixture
def tenant_state(catalog) -> dict:
    """Tenant the API client acts as; tests may swap it."""
    return {"tenant": TenantContext(org_id=catalog.org_id)}


@pytest_asyncio.fixture
async def client(session_factory, tenant_state, mock_redis):
    """HTTP client against the app, with the database and tenant overridden."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tenant] = lambda: tenant_state["tenant"]
    app.dependency_overrides[get_redis] = lambda: mock_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
