from __future__ import annotations

from typing import TYPE_CHECKING, List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agencia.models import Base
from agencia.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from agencia.models.supplier_order import SupplierOrder


class Supplier(Base, UUIDMixin, TimestampMixin):
    """
    Proveedor de la agencia (imprenta, materiales, maquila).
    """
    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    orders: Mapped[List["SupplierOrder"]] = relationship(
        "SupplierOrder",
        back_populates="supplier",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"Supplier(name={self.name!r})"
