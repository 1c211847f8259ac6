"""
Modelos SQLAlchemy para Cotizaciones
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Contiene:
- Quote: Cotización al cliente, opcionalmente ligada a un proyecto
- QuoteItem: Partida cotizada; puede originar como máximo una orden de compra
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agencia.models import Base
from agencia.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from agencia.models.project import Project


# Los estados están definidos en agencia.schemas.project.QuoteStatus


class Quote(Base, UUIDMixin, TimestampMixin):
    """
    Cotización.

    Sólo las cotizaciones DRAFT/SAVED reciben la sincronización del costo
    de artículo desde las órdenes de compra.
    """
    __tablename__ = "quotes"

    project_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    project_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="DRAFT",
        index=True,
        doc="Estado de la cotización",
    )

    project: Mapped[Optional["Project"]] = relationship(
        "Project",
        back_populates="quotes",
    )
    items: Mapped[List["QuoteItem"]] = relationship(
        "QuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"Quote(project_name={self.project_name!r}, status={self.status!r})"


class QuoteItem(Base, UUIDMixin, TimestampMixin):
    """
    Partida de cotización.

    Attributes:
        concept: Concepto cotizado (nombre de la partida de la orden)
        quantity: Cantidad cotizada
        product_code: Código de producto; llave de la sincronización de costos
        cost_article: Costo unitario interno de referencia
        order_created: True cuando ya existe la orden de compra de esta partida
        supplier_order_id: Referencia inversa a la orden generada (desnormalizada)
    """
    __tablename__ = "quote_items"

    quote_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    concept: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("1"),
    )
    product_code: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )
    cost_article: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    order_created: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    supplier_order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        nullable=True,
    )

    quote: Mapped["Quote"] = relationship(
        "Quote",
        back_populates="items",
    )

    def __repr__(self) -> str:
        return f"QuoteItem(concept={self.concept!r}, product_code={self.product_code!r})"
