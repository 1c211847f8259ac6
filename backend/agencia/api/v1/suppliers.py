"""
Router FastAPI para los Proveedores
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agencia.core.database import get_db
from agencia.schemas.supplier import (
    SupplierCreate,
    SupplierList,
    SupplierRead,
    SupplierResult,
    SupplierUpdate,
)
from agencia.schemas.supplier_order import DeleteResult
from agencia.services.supplier_service import supplier_service

router = APIRouter(
    prefix="/suppliers",
    tags=["Proveedores"],
)


def _supplier_result(supplier) -> SupplierResult:
    return SupplierResult(supplier=SupplierRead.model_validate(supplier))


@router.get(
    "/",
    name="proveedores_lista",
    summary="Lista de proveedores",
    response_model=SupplierList,
)
async def get_suppliers(
    page: int = Query(1, ge=1, description="Número de página"),
    per_page: int = Query(50, ge=1, le=200, description="Registros por página"),
    search: Optional[str] = Query(None, max_length=100, description="Búsqueda por nombre"),
    db: AsyncSession = Depends(get_db),
) -> SupplierList:
    suppliers, total = await supplier_service.get_all(db, page=page, per_page=per_page, search=search)
    return SupplierList(
        items=[SupplierRead.model_validate(s) for s in suppliers],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/{supplier_id}",
    name="proveedor_detalle",
    summary="Detalle de proveedor",
    response_model=SupplierResult,
)
async def get_supplier(
    supplier_id: uuid.UUID = Path(..., description="UUID del proveedor"),
    db: AsyncSession = Depends(get_db),
) -> SupplierResult:
    supplier = await supplier_service.get_by_id(db, supplier_id)
    return _supplier_result(supplier)


@router.post(
    "/",
    name="proveedor_crea",
    summary="Crea proveedor",
    response_model=SupplierResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_supplier(
    data: SupplierCreate,
    db: AsyncSession = Depends(get_db),
) -> SupplierResult:
    supplier = await supplier_service.create(db, data)
    await db.commit()
    return _supplier_result(supplier)


@router.put(
    "/{supplier_id}",
    name="proveedor_actualiza",
    summary="Cambia el nombre del proveedor",
    response_model=SupplierResult,
)
async def update_supplier(
    supplier_id: uuid.UUID = Path(..., description="UUID del proveedor"),
    data: SupplierUpdate = ...,
    db: AsyncSession = Depends(get_db),
) -> SupplierResult:
    supplier = await supplier_service.update(db, supplier_id, data)
    await db.commit()
    return _supplier_result(supplier)


@router.delete(
    "/{supplier_id}",
    name="proveedor_elimina",
    summary="Elimina proveedor",
    description="Sólo se eliminan proveedores sin órdenes de compra.",
    response_model=DeleteResult,
)
async def delete_supplier(
    supplier_id: uuid.UUID = Path(..., description="UUID del proveedor"),
    db: AsyncSession = Depends(get_db),
) -> DeleteResult:
    await supplier_service.delete(db, supplier_id)
    await db.commit()
    return DeleteResult(deleted_id=supplier_id)
