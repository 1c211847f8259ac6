"""
Schemas Pydantic para los Egresos Variables (libro de pagos)
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)
"""

import datetime
import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VariableExpenseRead(BaseModel):
    """Asiento del libro de egresos."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    amount: Decimal
    iva: Decimal
    category: Optional[str]
    date: datetime.datetime
    payment_method: Optional[str]
    description: Optional[str]
    supplier_id: Optional[uuid.UUID]
    supplier_order_id: Optional[uuid.UUID]
    project_id: Optional[uuid.UUID]
    quote_id: Optional[uuid.UUID]


class SupplierPaymentCreate(BaseModel):
    """
    Pago genérico a proveedor.

    Con `order_id` el pago se registra contra la orden (con todas sus
    validaciones de saldo); en otro caso se registra contra la cotización.
    """
    amount: Decimal = Field(
        ...,
        max_digits=12,
        decimal_places=2,
        description="Monto del pago (antes de IVA)",
    )
    iva: Decimal = Field(default=Decimal("0"), ge=Decimal("0"), max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)
    payment_method: Optional[str] = Field(None, max_length=50)
    order_id: Optional[uuid.UUID] = None
    quote_id: Optional[uuid.UUID] = None
    supplier_id: Optional[uuid.UUID] = None

    @model_validator(mode="after")
    def validate_target(self) -> "SupplierPaymentCreate":
        if self.order_id is None and self.quote_id is None and self.supplier_id is None:
            raise ValueError("Indique una orden, una cotización o un proveedor")
        return self


class ExpenseResult(BaseModel):
    success: bool = True
    expense: VariableExpenseRead
