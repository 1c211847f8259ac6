"""
Schemas Pydantic para los Proveedores
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)
"""

import datetime
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SupplierCreate(BaseModel):
    """Alta de proveedor. Sólo se captura el nombre."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Nombre del proveedor")


class SupplierUpdate(BaseModel):
    """Cambio de nombre del proveedor."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Nuevo nombre")


class SupplierRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


class SupplierList(BaseModel):
    """
    Respuesta paginada de proveedores (orden alfabético).

    Attributes:
        items: Proveedores de la página
        total: Número total de registros
        page: Página actual
        per_page: Registros por página
        total_pages: Número total de páginas (calculado)
    """
    success: bool = True
    items: list[SupplierRead]
    total: int
    page: int
    per_page: int
    total_pages: int = 0

    @model_validator(mode="after")
    def compute_total_pages(self) -> "SupplierList":
        if self.per_page > 0:
            self.total_pages = (self.total + self.per_page - 1) // self.per_page
        return self


class SupplierResult(BaseModel):
    success: bool = True
    supplier: SupplierRead
