"""
API v1 Routes
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Router versión 1 de la API.
"""

from fastapi import APIRouter

from agencia.api.v1 import expenses, projects, supplier_orders, suppliers

# Router agregado para v1
api_v1_router = APIRouter(prefix="/api/v1")

# Incluye los routers de los módulos
api_v1_router.include_router(suppliers.router)
api_v1_router.include_router(supplier_orders.router)
api_v1_router.include_router(projects.router)
api_v1_router.include_router(expenses.router)

# Exportación
__all__ = ["api_v1_router"]
