"""
Reinicia el esquema de la base de datos de desarrollo.

    python reset_db.py              # borra y recrea las tablas
    python reset_db.py --demo       # además carga un proveedor, un proyecto
                                    # APROBADO y una cotización de ejemplo

Se niega a correr con APP_ENV=production.
"""

import argparse
import asyncio
import os
import sys
from decimal import Decimal

# Agrega backend/ al PYTHONPATH para importar agencia.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))

from agencia.core.config import settings
from agencia.core.database import AsyncSessionLocal, engine
from agencia.models import Base, Project, Quote, QuoteItem, Supplier


async def load_demo_data() -> None:
    async with AsyncSessionLocal() as session:
        supplier = Supplier(name="Imprenta de prueba")
        project = Project(name="Proyecto de prueba", status="APROBADO")
        session.add_all([supplier, project])
        await session.flush()

        quote = Quote(project_id=project.id, project_name=project.name, status="DRAFT")
        session.add(quote)
        await session.flush()

        session.add(
            QuoteItem(
                quote_id=quote.id,
                concept="Lona impresa 3x2",
                quantity=Decimal("1"),
                product_code="LONA-32",
                cost_article=Decimal("0.00"),
            )
        )
        await session.commit()
        print(f"Datos de prueba: proveedor {supplier.id}, proyecto {project.id}")


async def reset(demo: bool) -> None:
    tables = sorted(Base.metadata.tables)
    print(f"Reiniciando {len(tables)} tablas: {', '.join(tables)}")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        if demo:
            await load_demo_data()
    finally:
        await engine.dispose()
    print("Esquema reiniciado")


def main() -> int:
    parser = argparse.ArgumentParser(description="Reinicia el esquema de Gestor Agencia")
    parser.add_argument("--demo", action="store_true", help="carga datos de prueba")
    args = parser.parse_args()

    if settings.is_production:
        print("APP_ENV=production: no se reinicia la base de datos", file=sys.stderr)
        return 1

    asyncio.run(reset(args.demo))
    return 0


if __name__ == "__main__":
    sys.exit(main())
