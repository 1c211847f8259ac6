"""
Router FastAPI para las Órdenes de Compra
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Define los endpoints de las órdenes de compra: CRUD, duplicado, estados,
pagos y saldo. Cada acción responde `{success: true, ...datos}`; los errores
se convierten en `{success: false, error, error_code}` en los handlers de
main.py.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agencia.core.database import get_db
from agencia.schemas.expense import VariableExpenseRead
from agencia.schemas.supplier_order import (
    BalanceResult,
    DeleteResult,
    OrderFromQuoteItemCreate,
    OrderPaymentCreate,
    OrderResult,
    OrderStatus,
    OrderStatusUpdate,
    PaymentListResult,
    PaymentResult,
    PaymentStatus,
    PaymentStatusUpdate,
    SupplierOrderCreate,
    SupplierOrderList,
    SupplierOrderRead,
    SupplierOrderUpdate,
)
from agencia.services.supplier_order_service import supplier_order_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/supplier-orders",
    tags=["Órdenes de Compra"],
)


def _order_result(order) -> OrderResult:
    return OrderResult(order=SupplierOrderRead.model_validate(order))


# -------------------------------------------------------------------
# Lectura
# -------------------------------------------------------------------

@router.get(
    "/",
    name="ordenes_lista",
    summary="Lista de órdenes de compra",
    response_model=SupplierOrderList,
    status_code=status.HTTP_200_OK,
)
async def get_supplier_orders(
    page: int = Query(1, ge=1, description="Número de página"),
    per_page: int = Query(20, ge=1, le=100, description="Registros por página"),
    supplier_id: Optional[uuid.UUID] = Query(None, description="Filtro por proveedor"),
    project_id: Optional[uuid.UUID] = Query(None, description="Filtro por proyecto"),
    status_filter: Optional[OrderStatus] = Query(None, description="Filtro por estado de surtido"),
    payment_status: Optional[PaymentStatus] = Query(None, description="Filtro por estado de pago"),
    db: AsyncSession = Depends(get_db),
) -> SupplierOrderList:
    orders, total = await supplier_order_service.get_all(
        db=db,
        supplier_id=supplier_id,
        project_id=project_id,
        status_filter=status_filter,
        payment_status=payment_status,
        page=page,
        per_page=per_page,
    )
    return SupplierOrderList(
        items=[SupplierOrderRead.model_validate(order) for order in orders],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=0,  # calculado por el model_validator
    )


@router.get(
    "/{order_id}",
    name="orden_detalle",
    summary="Detalle de orden de compra",
    response_model=OrderResult,
)
async def get_supplier_order(
    order_id: uuid.UUID = Path(..., description="UUID de la orden de compra"),
    db: AsyncSession = Depends(get_db),
) -> OrderResult:
    order = await supplier_order_service.get_by_id(db, order_id)
    return _order_result(order)


@router.get(
    "/{order_id}/balance",
    name="orden_saldo",
    summary="Saldo de la orden",
    description="Total ordenado, total pagado y saldo pendiente según el libro de egresos.",
    response_model=BalanceResult,
)
async def get_order_balance(
    order_id: uuid.UUID = Path(..., description="UUID de la orden de compra"),
    db: AsyncSession = Depends(get_db),
) -> BalanceResult:
    balance = await supplier_order_service.get_balance(db, order_id)
    return BalanceResult(balance=balance)


@router.get(
    "/{order_id}/payments",
    name="orden_pagos",
    summary="Pagos registrados de la orden",
    response_model=PaymentListResult,
)
async def get_order_payments(
    order_id: uuid.UUID = Path(..., description="UUID de la orden de compra"),
    db: AsyncSession = Depends(get_db),
) -> PaymentListResult:
    entries = await supplier_order_service.get_payments(db, order_id)
    return PaymentListResult(
        payments=[VariableExpenseRead.model_validate(entry) for entry in entries]
    )


# -------------------------------------------------------------------
# Creación y edición
# -------------------------------------------------------------------

@router.post(
    "/",
    name="orden_crea",
    summary="Crea orden de compra",
    response_model=OrderResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_supplier_order(
    data: SupplierOrderCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderResult:
    """
    Crea una orden de compra.

    Las partidas con costo unitario actualizan el costo de artículo de las
    cotizaciones en borrador con el mismo código de producto.
    """
    order = await supplier_order_service.create(db, data)
    await db.commit()
    return _order_result(order)


@router.post(
    "/from-quote-item",
    name="orden_desde_cotizacion",
    summary="Genera orden desde partida de cotización",
    description="Genera la orden de compra de una partida de cotización de un proyecto aprobado. "
               "Como máximo una orden por partida.",
    response_model=OrderResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_order_from_quote_item(
    data: OrderFromQuoteItemCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderResult:
    order = await supplier_order_service.create_from_quote_item(db, data)
    await db.commit()
    return _order_result(order)


@router.put(
    "/{order_id}",
    name="orden_actualiza",
    summary="Actualiza orden de compra",
    description="Actualiza partidas, fecha y referencias. "
               "NOTA: para los estados usar PATCH /status y PATCH /payment-status.",
    response_model=OrderResult,
)
async def update_supplier_order(
    order_id: uuid.UUID = Path(..., description="UUID de la orden de compra"),
    data: SupplierOrderUpdate = ...,
    db: AsyncSession = Depends(get_db),
) -> OrderResult:
    order = await supplier_order_service.update(db, order_id, data)
    await db.commit()
    return _order_result(order)


@router.post(
    "/{order_id}/duplicate",
    name="orden_duplica",
    summary="Duplica orden de compra",
    description="Crea una copia sin pagos, con ambos estados en PENDING.",
    response_model=OrderResult,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_supplier_order(
    order_id: uuid.UUID = Path(..., description="UUID de la orden de compra"),
    db: AsyncSession = Depends(get_db),
) -> OrderResult:
    order = await supplier_order_service.duplicate(db, order_id)
    await db.commit()
    return _order_result(order)


@router.delete(
    "/{order_id}",
    name="orden_elimina",
    summary="Elimina orden de compra",
    description="Elimina una orden sin pagos y libera la partida de cotización que la originó.",
    response_model=DeleteResult,
)
async def delete_supplier_order(
    order_id: uuid.UUID = Path(..., description="UUID de la orden de compra"),
    db: AsyncSession = Depends(get_db),
) -> DeleteResult:
    await supplier_order_service.delete(db, order_id)
    await db.commit()
    return DeleteResult(deleted_id=order_id)


# -------------------------------------------------------------------
# Estados y pagos
# -------------------------------------------------------------------

@router.patch(
    "/{order_id}/status",
    name="orden_cambia_estado",
    summary="Cambia el estado de surtido",
    response_model=OrderResult,
)
async def change_order_status(
    order_id: uuid.UUID = Path(..., description="UUID de la orden de compra"),
    data: OrderStatusUpdate = ...,
    db: AsyncSession = Depends(get_db),
) -> OrderResult:
    order = await supplier_order_service.update_status(db, order_id, data.status)
    await db.commit()
    return _order_result(order)


@router.patch(
    "/{order_id}/payment-status",
    name="orden_cambia_estado_pago",
    summary="Fija el estado de pago manualmente",
    description="Override manual del estado de pago. Marcar PAID una orden sin pagos "
               "registra un asiento de conciliación por el total.",
    response_model=OrderResult,
)
async def change_payment_status(
    order_id: uuid.UUID = Path(..., description="UUID de la orden de compra"),
    data: PaymentStatusUpdate = ...,
    db: AsyncSession = Depends(get_db),
) -> OrderResult:
    order = await supplier_order_service.update_payment_status(db, order_id, data.payment_status)
    await db.commit()
    return _order_result(order)


@router.post(
    "/{order_id}/payments",
    name="orden_registra_pago",
    summary="Registra un pago",
    description="Registra un pago contra la orden. El monto no puede exceder el saldo pendiente.",
    response_model=PaymentResult,
    status_code=status.HTTP_201_CREATED,
)
async def register_order_payment(
    order_id: uuid.UUID = Path(..., description="UUID de la orden de compra"),
    data: OrderPaymentCreate = ...,
    db: AsyncSession = Depends(get_db),
) -> PaymentResult:
    expense, balance = await supplier_order_service.register_payment(db, order_id, data)
    await db.commit()
    return PaymentResult(
        expense=VariableExpenseRead.model_validate(expense),
        balance=balance,
    )
