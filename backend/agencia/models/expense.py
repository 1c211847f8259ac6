"""
Modelo SQLAlchemy para los Egresos Variables
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Cada fila es un asiento del libro de pagos: una salida real de efectivo,
opcionalmente ligada a una orden de compra. Este módulo nunca modifica ni
borra asientos.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from agencia.models import Base
from agencia.models.mixins import TimestampMixin, UUIDMixin, utcnow

if TYPE_CHECKING:
    from agencia.models.supplier_order import SupplierOrder


class VariableExpense(Base, UUIDMixin, TimestampMixin):
    """
    Egreso variable.

    Attributes:
        amount: Importe antes de IVA
        iva: IVA del importe
        category: Categoría contable (ej. "Material")
        date: Fecha del egreso
        payment_method: Forma de pago (ej. "TRANSFER")
        description: Descripción libre
    """

    __tablename__ = "variable_expenses"

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    iva: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    date: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    supplier_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("suppliers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    supplier_order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("supplier_orders.id", ondelete="SET NULL"),
        nullable=True,
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

    supplier_order: Mapped[Optional["SupplierOrder"]] = relationship(
        "SupplierOrder",
        back_populates="expenses",
    )

    def __repr__(self) -> str:
        return f"VariableExpense(amount={self.amount!r}, category={self.category!r})"
