"""
Router FastAPI para los pagos genéricos a proveedores
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from agencia.core.database import get_db
from agencia.schemas.expense import ExpenseResult, SupplierPaymentCreate, VariableExpenseRead
from agencia.services.expense_service import expense_service

router = APIRouter(
    prefix="/expenses",
    tags=["Egresos"],
)


@router.post(
    "/supplier-payments",
    name="egreso_pago_proveedor",
    summary="Registra un pago a proveedor",
    description="Pago genérico desde la cotización. Si se indica `order_id` se registra "
               "contra la orden con la validación de saldo.",
    response_model=ExpenseResult,
    status_code=status.HTTP_201_CREATED,
)
async def register_supplier_payment(
    data: SupplierPaymentCreate,
    db: AsyncSession = Depends(get_db),
) -> ExpenseResult:
    expense = await expense_service.register_quote_payment(db, data)
    await db.commit()
    return ExpenseResult(expense=VariableExpenseRead.model_validate(expense))
