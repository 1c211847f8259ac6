"""
Modelo SQLAlchemy para las Órdenes de Compra a proveedores
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Contiene:
- SupplierOrder: Orden de compra con sus partidas (JSON) y los dos estados
  independientes: surtido (status) y pago (payment_status)
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agencia.models import Base
from agencia.models.mixins import TimestampMixin, UUIDMixin
from agencia.models.types import OrderItemsType
from agencia.schemas.supplier_order import OrderItem

if TYPE_CHECKING:
    from agencia.models.expense import VariableExpense
    from agencia.models.project import Project
    from agencia.models.supplier import Supplier


# Los estados están definidos en agencia.schemas.supplier_order
# (OrderStatus, PaymentStatus)


class SupplierOrder(Base, UUIDMixin, TimestampMixin):
    """
    Orden de compra a un proveedor.

    Attributes:
        supplier_id: Proveedor (obligatorio)
        project_id: Proyecto al que se carga la orden
        quote_id: Cotización de origen
        quote_item_id: Partida de cotización que originó la orden
        task_id: Tarea de proveedor asociada (referencia externa)
        items: Partidas {code, name, quantity, unitCost}
        expected_date: Fecha esperada de entrega
        status: Estado de surtido (PENDING, ORDERED, RECEIVED)
        payment_status: Estado de pago (PENDING, PARTIAL, PAID)

    States (surtido):
        PENDING ⇄ ORDERED ⇄ RECEIVED

    payment_status se deriva del libro de egresos; sólo el override manual
    lo fija directamente.
    """

    __tablename__ = "supplier_orders"

    # ------------------------------------------------------------
    # Columnas de relación
    # ------------------------------------------------------------
    supplier_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("suppliers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    quote_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("quotes.id", ondelete="SET NULL"),
        nullable=True,
    )
    quote_item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("quote_items.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    task_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    # ------------------------------------------------------------
    # Datos
    # ------------------------------------------------------------
    items: Mapped[List["OrderItem"]] = mapped_column(
        OrderItemsType,
        nullable=False,
        default=list,
        doc="Partidas de la orden",
    )
    expected_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="PENDING",
        index=True,
        doc="Estado de surtido",
    )
    payment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="PENDING",
        index=True,
        doc="Estado de pago",
    )

    # ------------------------------------------------------------
    # Relaciones
    # ------------------------------------------------------------
    supplier: Mapped["Supplier"] = relationship(
        "Supplier",
        back_populates="orders",
    )
    project: Mapped[Optional["Project"]] = relationship(
        "Project",
        back_populates="supplier_orders",
    )
    expenses: Mapped[List["VariableExpense"]] = relationship(
        "VariableExpense",
        back_populates="supplier_order",
        lazy="noload",
        passive_deletes=True,
    )

    @property
    def total(self) -> Decimal:
        """Total ordenado: suma de (unitCost ?? 0) * (quantity ?? 0)."""
        return sum((item.line_total for item in self.items or []), Decimal("0"))

    def __repr__(self) -> str:
        return (
            f"SupplierOrder(id={self.id!r}, status={self.status!r}, "
            f"payment_status={self.payment_status!r})"
        )
