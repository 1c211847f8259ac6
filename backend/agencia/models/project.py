from __future__ import annotations

from typing import TYPE_CHECKING, List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agencia.models import Base
from agencia.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from agencia.models.quote import Quote
    from agencia.models.supplier_order import SupplierOrder


# Los estados están definidos en agencia.schemas.project.ProjectStatus


class Project(Base, UUIDMixin, TimestampMixin):
    """
    Proyecto de la agencia.

    States:
        COTIZANDO → APROBADO → EN_PRODUCCION → ENTREGADO → CERRADO
                                                   ↓
                                               CANCELADO
    Con el proyecto CERRADO no se generan órdenes ni se registran pagos.
    """
    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="COTIZANDO",
        doc="Estado del proyecto",
    )

    quotes: Mapped[List["Quote"]] = relationship(
        "Quote",
        back_populates="project",
        lazy="noload",
    )

    supplier_orders: Mapped[List["SupplierOrder"]] = relationship(
        "SupplierOrder",
        back_populates="project",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"Project(name={self.name!r}, status={self.status!r})"
