"""
Schemas Pydantic para las Órdenes de Compra a proveedores
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Define los estados de la orden, la partida de orden (`OrderItem`) y los
schemas de validación y serialización de la API.
"""

import datetime
import json
import math
import uuid
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from agencia.schemas.expense import VariableExpenseRead


# -------------------------------------------------------------------
# Enum de estados
# -------------------------------------------------------------------

class OrderStatus(str, Enum):
    """Estado de surtido de la orden."""
    PENDING = "PENDING"
    ORDERED = "ORDERED"
    RECEIVED = "RECEIVED"


class PaymentStatus(str, Enum):
    """Estado de pago de la orden, derivado del libro de egresos."""
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class PaymentStatusSource(str, Enum):
    """Origen de un cambio de estado de pago."""
    LEDGER = "LEDGER"
    MANUAL_OVERRIDE = "MANUAL_OVERRIDE"


# La validación de transiciones ocurre en el service layer
VALID_STATUS_TRANSITIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.ORDERED],
    OrderStatus.ORDERED: [OrderStatus.PENDING, OrderStatus.RECEIVED],
    OrderStatus.RECEIVED: [OrderStatus.ORDERED],
}


# -------------------------------------------------------------------
# Partida de la orden
# -------------------------------------------------------------------

class OrderItem(BaseModel):
    """
    Partida de una orden de compra.

    Se persiste como JSON con las claves `code`, `name`, `quantity`,
    `unitCost`.
    """
    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(default="N/A", max_length=100, description="Código de producto")
    name: str = Field(default="", max_length=500, description="Descripción de la partida")
    quantity: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        max_digits=12,
        decimal_places=2,
        description="Cantidad",
    )
    unit_cost: Optional[Decimal] = Field(
        default=None,
        ge=Decimal("0"),
        max_digits=12,
        decimal_places=2,
        alias="unitCost",
        description="Costo unitario",
    )

    @computed_field
    @property
    def line_total(self) -> Decimal:
        """Costo de la partida ((unitCost ?? 0) * (quantity ?? 0))."""
        return (self.unit_cost or Decimal("0")) * (self.quantity or Decimal("0"))


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Convierte un número (o texto numérico) a Decimal; None si no es válido."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def _item_from_mapping(entry: Mapping[str, Any]) -> OrderItem:
    unit_cost = entry.get("unitCost", entry.get("unit_cost"))
    return OrderItem.model_construct(
        code=str(entry.get("code") or "N/A"),
        name=str(entry.get("name") or ""),
        quantity=_to_decimal(entry.get("quantity")) or Decimal("0"),
        unit_cost=_to_decimal(unit_cost),
    )


def parse_order_items(raw: Any) -> list[OrderItem]:
    """
    Deserializa las partidas de una orden.

    Acepta una secuencia de partidas (dict u OrderItem) o su forma JSON
    serializada. Cualquier otra carga útil (JSON inválido, objeto no lista)
    se trata como lista vacía: la orden vale 0, no es un error.
    Las entradas que no son partidas se omiten.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (TypeError, ValueError):
            return []
    if not isinstance(raw, (list, tuple)):
        return []

    items: list[OrderItem] = []
    for entry in raw:
        if isinstance(entry, OrderItem):
            items.append(entry)
        elif isinstance(entry, Mapping):
            items.append(_item_from_mapping(entry))
    return items


def serialize_order_items(items: Iterable[OrderItem]) -> list[dict[str, Any]]:
    """Forma JSON de las partidas (números como float, como en el almacén)."""
    return [
        {
            "code": item.code,
            "name": item.name,
            "quantity": float(item.quantity),
            "unitCost": float(item.unit_cost) if item.unit_cost is not None else None,
        }
        for item in items
    ]


# -------------------------------------------------------------------
# Schemas de la orden
# -------------------------------------------------------------------

class SupplierOrderCreate(BaseModel):
    """
    Schema para crear una orden de compra.

    Attributes:
        supplier_id: Proveedor al que se hace el pedido
        project_id: Proyecto al que se carga la orden (opcional)
        quote_id: Cotización de origen (opcional)
        task_id: Tarea de proveedor asociada (opcional)
        items: Partidas de la orden
        expected_date: Fecha esperada de entrega
    """
    supplier_id: uuid.UUID
    project_id: Optional[uuid.UUID] = None
    quote_id: Optional[uuid.UUID] = None
    task_id: Optional[uuid.UUID] = None
    items: list[OrderItem] = Field(default_factory=list)
    expected_date: Optional[datetime.date] = None


class SupplierOrderUpdate(BaseModel):
    """
    Schema para actualizar una orden de compra.

    Todos los campos son opcionales. Los estados NO se cambian aquí
    (usar los endpoints de status y payment-status).
    """
    project_id: Optional[uuid.UUID] = None
    quote_id: Optional[uuid.UUID] = None
    task_id: Optional[uuid.UUID] = None
    items: Optional[list[OrderItem]] = None
    expected_date: Optional[datetime.date] = None


class OrderStatusUpdate(BaseModel):
    """Cambio de estado de surtido."""
    status: OrderStatus = Field(..., description="Nuevo estado de la orden")


class PaymentStatusUpdate(BaseModel):
    """Cambio manual del estado de pago (ruta heredada del selector de estado)."""
    payment_status: str = Field(..., description="PENDING | PARTIAL | PAID")


class OrderPaymentCreate(BaseModel):
    """
    Registro de un pago contra una orden.

    El signo del monto no se restringe aquí: el servicio responde con
    INVALID_AMOUNT para montos no positivos. El tamaño sí: el monto debe
    caber en una columna Numeric(12, 2).
    """
    amount: Decimal = Field(
        ...,
        max_digits=12,
        decimal_places=2,
        description="Monto del pago (antes de IVA)",
    )
    description: Optional[str] = Field(None, max_length=500)
    payment_method: Optional[str] = Field(None, max_length=50)


class OrderFromQuoteItemCreate(BaseModel):
    """Generación de una orden a partir de una partida de cotización aprobada."""
    quote_item_id: uuid.UUID
    supplier_id: uuid.UUID


class SupplierOrderRead(BaseModel):
    """Lectura de una orden de compra con su total calculado."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    supplier_id: uuid.UUID
    project_id: Optional[uuid.UUID]
    quote_id: Optional[uuid.UUID]
    quote_item_id: Optional[uuid.UUID]
    task_id: Optional[uuid.UUID]
    items: list[OrderItem] = Field(default_factory=list)
    expected_date: Optional[datetime.date]
    status: OrderStatus
    payment_status: PaymentStatus
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @computed_field
    @property
    def total(self) -> Decimal:
        """Total ordenado (suma de line_total)."""
        return sum((item.line_total for item in self.items), Decimal("0"))


class OrderBalance(BaseModel):
    """
    Saldo de una orden según el libro de egresos.

    Un saldo negativo (egresos registrados por otra vía) cuenta como
    liquidado: no se admiten más pagos.
    """
    order_id: uuid.UUID
    total_ordered: Decimal
    total_paid: Decimal
    pending_balance: Decimal
    payment_status: PaymentStatus

    @computed_field
    @property
    def is_settled(self) -> bool:
        return self.pending_balance <= Decimal("0")


class SupplierOrderList(BaseModel):
    """
    Respuesta paginada de órdenes de compra.

    Attributes:
        items: Órdenes de la página
        total: Número total de registros
        page: Página actual
        per_page: Registros por página
        total_pages: Número total de páginas (calculado)
    """
    success: bool = True
    items: list[SupplierOrderRead]
    total: int
    page: int
    per_page: int
    total_pages: int = 0

    @model_validator(mode="after")
    def compute_total_pages(self) -> "SupplierOrderList":
        if self.per_page > 0:
            self.total_pages = (self.total + self.per_page - 1) // self.per_page
        return self


# -------------------------------------------------------------------
# Respuestas de la API ({success: true, ...datos})
# -------------------------------------------------------------------

class OrderResult(BaseModel):
    success: bool = True
    order: SupplierOrderRead


class BalanceResult(BaseModel):
    success: bool = True
    balance: OrderBalance


class PaymentResult(BaseModel):
    """Pago registrado y saldo resultante de la orden."""
    success: bool = True
    expense: VariableExpenseRead
    balance: OrderBalance


class PaymentListResult(BaseModel):
    success: bool = True
    payments: list[VariableExpenseRead]


class DeleteResult(BaseModel):
    success: bool = True
    deleted_id: uuid.UUID
