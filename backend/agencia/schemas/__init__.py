"""
Schemas Pydantic del proyecto Gestor Agencia

Este módulo contiene los schemas Pydantic usados para la validación y la
serialización de las respuestas de la API.
"""

# Import de los schemas para usarlos con import directo
# ej: from agencia.schemas import SupplierOrderRead, OrderBalance

from agencia.schemas.expense import (
    ExpenseResult,
    SupplierPaymentCreate,
    VariableExpenseRead,
)
from agencia.schemas.project import (
    ClosureEligibility,
    ClosureEligibilityResult,
    ProjectCreate,
    ProjectRead,
    ProjectResult,
    ProjectStatus,
    QuoteItemRead,
    QuoteStatus,
)
from agencia.schemas.supplier import (
    SupplierCreate,
    SupplierList,
    SupplierRead,
    SupplierResult,
    SupplierUpdate,
)
from agencia.schemas.supplier_order import (
    BalanceResult,
    DeleteResult,
    OrderBalance,
    OrderFromQuoteItemCreate,
    OrderItem,
    OrderPaymentCreate,
    OrderResult,
    OrderStatus,
    OrderStatusUpdate,
    PaymentListResult,
    PaymentResult,
    PaymentStatus,
    PaymentStatusSource,
    PaymentStatusUpdate,
    SupplierOrderCreate,
    SupplierOrderList,
    SupplierOrderRead,
    SupplierOrderUpdate,
)

__all__ = [
    # Egresos
    "ExpenseResult",
    "SupplierPaymentCreate",
    "VariableExpenseRead",
    # Proyectos
    "ClosureEligibility",
    "ClosureEligibilityResult",
    "ProjectCreate",
    "ProjectRead",
    "ProjectResult",
    "ProjectStatus",
    "QuoteItemRead",
    "QuoteStatus",
    # Proveedores
    "SupplierCreate",
    "SupplierList",
    "SupplierRead",
    "SupplierResult",
    "SupplierUpdate",
    # Órdenes de compra
    "BalanceResult",
    "DeleteResult",
    "OrderBalance",
    "OrderFromQuoteItemCreate",
    "OrderItem",
    "OrderPaymentCreate",
    "OrderResult",
    "OrderStatus",
    "OrderStatusUpdate",
    "PaymentListResult",
    "PaymentResult",
    "PaymentStatus",
    "PaymentStatusSource",
    "PaymentStatusUpdate",
    "SupplierOrderCreate",
    "SupplierOrderList",
    "SupplierOrderRead",
    "SupplierOrderUpdate",
]
