"""
Cálculo del costo de una orden de compra
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Funciones puras, sin acceso a base de datos.
"""

from decimal import Decimal
from typing import Any

from agencia.schemas.supplier_order import OrderItem, parse_order_items

__all__ = ["compute_order_total", "parse_order_items"]


def compute_order_total(raw_items: Any) -> Decimal:
    """
    Total de una orden: Σ (unitCost ?? 0) × (quantity ?? 0).

    Args:
        raw_items: Lista de partidas (dict u OrderItem) o su JSON serializado

    Returns:
        Decimal: El total; 0 para listas vacías o cargas mal formadas
    """
    items: list[OrderItem] = parse_order_items(raw_items)
    return sum((item.line_total for item in items), Decimal("0"))
