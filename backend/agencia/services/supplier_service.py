"""
Service Layer para los Proveedores
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Alta, consulta, cambio de nombre y baja de proveedores. Un proveedor con
órdenes de compra no se elimina: las órdenes y su libro de pagos lo
referencian.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agencia.core.exceptions import BusinessRuleViolation, NotFoundError, TransientFailure
from agencia.core.revalidation import mark_stale
from agencia.models import Supplier, SupplierOrder
from agencia.schemas.supplier import SupplierCreate, SupplierUpdate

logger = logging.getLogger(__name__)


class SupplierService:
    """Service para las operaciones CRUD sobre proveedores."""

    async def _flush(self, db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Error de base de datos al %s: %s - %s", action, e.__class__.__name__, e)
            await db.rollback()
            raise TransientFailure() from e

    async def get_all(
        self,
        db: AsyncSession,
        page: int = 1,
        per_page: int = 50,
        search: Optional[str] = None,
    ) -> tuple[list[Supplier], int]:
        """
        Lista paginada de proveedores en orden alfabético.

        Args:
            db: Sesión de base de datos
            page: Número de página
            per_page: Registros por página
            search: Texto a buscar en el nombre (opcional)

        Returns:
            Tuple de (lista de proveedores, total)
        """
        conditions = []
        if search:
            conditions.append(Supplier.name.ilike(f"%{search}%"))

        query = select(Supplier).order_by(Supplier.name.asc())
        count_query = select(func.count()).select_from(Supplier)
        if conditions:
            query = query.where(*conditions)
            count_query = count_query.where(*conditions)

        result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
        suppliers = list(result.scalars().all())

        total = (await db.execute(count_query)).scalar() or 0
        logger.debug("Recuperados %d proveedores de %d", len(suppliers), total)
        return suppliers, total

    async def get_by_id(self, db: AsyncSession, supplier_id: uuid.UUID) -> Supplier:
        supplier = await db.get(Supplier, supplier_id)
        if not supplier:
            logger.warning("Proveedor no encontrado: %s", supplier_id)
            raise NotFoundError(
                f"Proveedor {supplier_id} no encontrado",
                error_code="SUPPLIER_NOT_FOUND",
            )
        return supplier

    async def create(self, db: AsyncSession, data: SupplierCreate) -> Supplier:
        supplier = Supplier(name=data.name)
        db.add(supplier)
        await self._flush(db, "crear proveedor")

        mark_stale(db, "/suppliers")
        logger.info("Creado proveedor %s (%s)", supplier.id, supplier.name)
        return supplier

    async def update(
        self,
        db: AsyncSession,
        supplier_id: uuid.UUID,
        data: SupplierUpdate,
    ) -> Supplier:
        """Cambia el nombre de un proveedor existente."""
        supplier = await self.get_by_id(db, supplier_id)
        supplier.name = data.name
        await self._flush(db, "actualizar proveedor")

        mark_stale(db, "/suppliers", f"/suppliers/{supplier.id}")
        logger.info("Actualizado proveedor %s", supplier.id)
        return supplier

    async def delete(self, db: AsyncSession, supplier_id: uuid.UUID) -> None:
        """
        Elimina un proveedor sin órdenes de compra.

        Raises:
            NotFoundError: SUPPLIER_NOT_FOUND
            BusinessRuleViolation: SUPPLIER_HAS_ORDERS
        """
        supplier = await self.get_by_id(db, supplier_id)

        count_query = select(func.count()).select_from(SupplierOrder).where(
            SupplierOrder.supplier_id == supplier.id
        )
        orders_count = (await db.execute(count_query)).scalar() or 0
        if orders_count:
            logger.warning("Proveedor %s con %d órdenes, no se elimina", supplier_id, orders_count)
            raise BusinessRuleViolation(
                "El proveedor tiene órdenes de compra y no se puede eliminar",
                error_code="SUPPLIER_HAS_ORDERS",
                extra={"orders_count": orders_count},
            )

        await db.delete(supplier)
        await self._flush(db, "eliminar proveedor")

        mark_stale(db, "/suppliers")
        logger.info("Eliminado proveedor %s", supplier_id)


supplier_service = SupplierService()
