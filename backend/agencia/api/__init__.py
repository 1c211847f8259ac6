"""
API Routes
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Módulo para la agregación de los routers versionados.
"""

from agencia.api.v1 import api_v1_router

# Exportación router
__all__ = ["api_v1_router"]
