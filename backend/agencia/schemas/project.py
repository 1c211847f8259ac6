"""
Schemas Pydantic para Proyectos y Cotizaciones
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)
"""

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectStatus(str, Enum):
    """Ciclo de vida del proyecto. CERRADO es terminal."""
    COTIZANDO = "COTIZANDO"
    APROBADO = "APROBADO"
    EN_PRODUCCION = "EN_PRODUCCION"
    ENTREGADO = "ENTREGADO"
    CERRADO = "CERRADO"
    CANCELADO = "CANCELADO"


# Estados en los que no se pueden generar órdenes desde partidas de cotización
NOT_APPROVED_STATUSES: frozenset[str] = frozenset(
    {ProjectStatus.COTIZANDO.value, ProjectStatus.CANCELADO.value}
)


class QuoteStatus(str, Enum):
    """Estados de la cotización."""
    DRAFT = "DRAFT"
    SAVED = "SAVED"
    SENT = "SENT"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    REPLACED = "REPLACED"


# Cotizaciones cuyo costo de artículo se sincroniza con el costo ordenado
COST_SYNC_QUOTE_STATUSES: tuple[str, ...] = (
    QuoteStatus.DRAFT.value,
    QuoteStatus.SAVED.value,
)


def is_closed(status: Optional[str]) -> bool:
    """Indica si el estado del proyecto es el terminal (CERRADO)."""
    return status == ProjectStatus.CERRADO.value


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    status: ProjectStatus = ProjectStatus.COTIZANDO


class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    status: ProjectStatus
    created_at: datetime.datetime
    updated_at: datetime.datetime


class ClosureEligibility(BaseModel):
    """
    Elegibilidad de un proyecto para el cierre financiero.

    Un proyecto se puede cerrar sólo cuando todas sus órdenes de compra
    están pagadas.
    """
    project_id: uuid.UUID
    eligible: bool
    pending_count: int = 0
    status: ProjectStatus
    reason: Optional[str] = None


class QuoteItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    quote_id: uuid.UUID
    concept: str
    quantity: Decimal
    product_code: Optional[str]
    cost_article: Decimal
    order_created: bool
    supplier_order_id: Optional[uuid.UUID]


class ProjectResult(BaseModel):
    success: bool = True
    project: ProjectRead


class ClosureEligibilityResult(BaseModel):
    success: bool = True
    eligibility: ClosureEligibility
