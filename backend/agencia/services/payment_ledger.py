"""
Libro de pagos de las órdenes de compra
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

El saldo de una orden se deriva siempre de los egresos variables ligados a
ella; el estado de pago guardado en la orden es un valor derivado.

Contiene:
- total_paid / pending_balance / derive_payment_status: funciones puras
- load_ledger / build_balance: lectura del libro dentro de la transacción
"""

import uuid
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agencia.models import SupplierOrder, VariableExpense
from agencia.schemas.supplier_order import OrderBalance, PaymentStatus


def total_paid(amounts: Iterable[Any]) -> Decimal:
    """Suma de importes del libro. None cuenta como 0."""
    total = Decimal("0")
    for amount in amounts:
        if amount is None:
            continue
        total += amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return total


def pending_balance(total_ordered: Decimal, paid: Decimal) -> Decimal:
    """
    Saldo pendiente (total - pagado).

    Puede ser negativo si se registraron egresos por otra vía; los
    llamadores tratan cualquier valor <= 0 como liquidado.
    """
    return total_ordered - paid


def derive_payment_status(
    total_ordered: Decimal,
    paid: Decimal,
    epsilon: Decimal,
) -> PaymentStatus:
    """
    Estado de pago según lo pagado.

    - PENDING si no hay pagos (paid <= 0)
    - PAID si paid >= total - epsilon
    - PARTIAL en otro caso
    """
    if paid <= 0:
        return PaymentStatus.PENDING
    if paid >= total_ordered - epsilon:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL


async def load_ledger(
    db: AsyncSession,
    order_id: uuid.UUID,
) -> list[VariableExpense]:
    """Asientos del libro ligados a una orden, del más antiguo al más reciente."""
    result = await db.execute(
        select(VariableExpense)
        .where(VariableExpense.supplier_order_id == order_id)
        .order_by(VariableExpense.date.asc(), VariableExpense.created_at.asc())
    )
    return list(result.scalars().all())


def build_balance(
    order: SupplierOrder,
    entries: Iterable[VariableExpense],
    epsilon: Decimal,
) -> OrderBalance:
    """Saldo de la orden a partir de sus asientos ya cargados."""
    total_ordered = order.total
    paid = total_paid(entry.amount for entry in entries)
    return OrderBalance(
        order_id=order.id,
        total_ordered=total_ordered,
        total_paid=paid,
        pending_balance=pending_balance(total_ordered, paid),
        payment_status=derive_payment_status(total_ordered, paid, epsilon),
    )
