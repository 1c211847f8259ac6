"""
Fixtures de pytest: base de datos SQLite en memoria por prueba, datos de
ejemplo (proveedor, proyecto aprobado, cotización en borrador, orden) y
cliente HTTP contra la aplicación FastAPI.
"""

import os

# La configuración se lee al importar agencia: forzar SQLite antes
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "testing")

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from agencia.core.config import PaymentPolicy
from agencia.core.database import get_db
from agencia.main import app
from agencia.models import Base, Project, Quote, QuoteItem, Supplier, SupplierOrder
from agencia.schemas.supplier_order import parse_order_items
from agencia.services.supplier_order_service import SupplierOrderService


# ============================================================
# Base de datos
# ============================================================


@pytest_asyncio.fixture()
async def db_session():
    """Base de datos SQLite en memoria nueva para cada prueba."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def mock_db():
    """Mock de AsyncSession para inyectar fallos del almacén."""
    db = AsyncMock(spec=AsyncSession)
    db.execute = AsyncMock()
    db.get = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.info = {}
    return db


# ============================================================
# Servicio
# ============================================================


@pytest.fixture
def policy() -> PaymentPolicy:
    return PaymentPolicy(
        vat_rate=Decimal("0.16"),
        epsilon=Decimal("0.01"),
        expense_category="Material",
        default_payment_method="TRANSFER",
    )


@pytest.fixture
def orders(policy) -> SupplierOrderService:
    return SupplierOrderService(policy)


# ============================================================
# Datos de ejemplo
# ============================================================


@pytest_asyncio.fixture()
async def seed(db_session):
    """
    Proveedor, proyecto APROBADO con cotización DRAFT y una partida, y una
    orden de compra con partidas [{quantity: 2, unitCost: 100}] (total 200).
    """
    supplier = Supplier(name="Imprenta Sol")
    project = Project(name="Campaña Primavera", status="APROBADO")
    db_session.add_all([supplier, project])
    await db_session.flush()

    quote = Quote(project_id=project.id, project_name=project.name, status="DRAFT")
    db_session.add(quote)
    await db_session.flush()

    quote_item = QuoteItem(
        quote_id=quote.id,
        concept="Lona impresa 3x2",
        quantity=Decimal("3"),
        product_code="LONA-32",
        cost_article=Decimal("50.00"),
    )
    order = SupplierOrder(
        supplier_id=supplier.id,
        project_id=project.id,
        quote_id=quote.id,
        items=parse_order_items([
            {"code": "VIN-01", "name": "Vinil adhesivo", "quantity": 2, "unitCost": 100},
        ]),
    )
    db_session.add_all([quote_item, order])
    await db_session.commit()

    return {
        "supplier": supplier,
        "project": project,
        "quote": quote,
        "quote_item": quote_item,
        "order": order,
    }


# ============================================================
# Cliente HTTP
# ============================================================


@pytest_asyncio.fixture()
async def client(db_session):
    """AsyncClient de httpx ligado a la aplicación FastAPI."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()
