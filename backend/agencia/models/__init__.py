"""
Modelos de base de datos SQLAlchemy
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Import centralizado de todos los modelos (metadata para create_all/reset).

Modelos:
- Supplier: Proveedores
- Project: Proyectos de la agencia (ciclo COTIZANDO → CERRADO)
- Quote / QuoteItem: Cotizaciones y sus partidas
- SupplierOrder: Órdenes de compra a proveedores
- VariableExpense: Egresos variables (asientos del libro de pagos)
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Clase base de todos los modelos SQLAlchemy."""
    pass


from agencia.models.supplier import Supplier
from agencia.models.project import Project
from agencia.models.quote import Quote, QuoteItem
from agencia.models.supplier_order import SupplierOrder
from agencia.models.expense import VariableExpense

__all__ = [
    "Base",
    "Supplier",
    "Project",
    "Quote",
    "QuoteItem",
    "SupplierOrder",
    "VariableExpense",
]
