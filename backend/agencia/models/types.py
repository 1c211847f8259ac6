"""
Tipos de columna para importes y partidas de orden
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

- round_money: redondeo de importes (MXN) a centavos
- OrderItemsType: partidas de una orden de compra guardadas como JSON.
  Se deserializan una sola vez al leer y se serializan una sola vez al
  escribir; las filas heredadas con JSON en texto o mal formado se leen
  como lista (posiblemente vacía) en lugar de fallar.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from sqlalchemy import JSON
from sqlalchemy.types import TypeDecorator

from agencia.schemas.supplier_order import (
    OrderItem,
    parse_order_items,
    serialize_order_items,
)

CENT = Decimal("0.01")


def round_money(value: Any) -> Decimal:
    """Redondea un importe a centavos (ROUND_HALF_UP). None cuenta como 0."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class OrderItemsType(TypeDecorator):
    """Lista de OrderItem persistida como JSON."""

    impl = JSON
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> Optional[list[dict[str, Any]]]:
        if value is None:
            return []
        return serialize_order_items(parse_order_items(value))

    def process_result_value(self, value: Any, dialect) -> list[OrderItem]:
        return parse_order_items(value)
