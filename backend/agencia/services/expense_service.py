"""
Service Layer para los pagos genéricos a proveedores
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Pagos registrados desde la cotización (sin orden de compra). Cuando el pago
indica una orden se delega en SupplierOrderService, que es el único que
escribe asientos ligados a órdenes.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from agencia.core.exceptions import BusinessRuleViolation, InvalidInputError, NotFoundError
from agencia.core.revalidation import mark_stale
from agencia.models import Project, Quote, Supplier, VariableExpense
from agencia.models.mixins import utcnow
from agencia.models.types import round_money
from agencia.schemas.expense import SupplierPaymentCreate
from agencia.schemas.project import is_closed
from agencia.schemas.supplier_order import OrderPaymentCreate
from agencia.services.supplier_order_service import SupplierOrderService, supplier_order_service

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Pago registrado"


class ExpenseService:
    def __init__(self, orders: SupplierOrderService) -> None:
        self.orders = orders

    async def register_quote_payment(
        self,
        db: AsyncSession,
        data: SupplierPaymentCreate,
    ) -> VariableExpense:
        """
        Registra un pago a proveedor.

        Con `order_id` delega en register_payment (validación de saldo);
        en otro caso crea un egreso ligado a la cotización y su proyecto.

        Raises:
            NotFoundError: QUOTE_NOT_FOUND, SUPPLIER_NOT_FOUND
            BusinessRuleViolation: PROJECT_CLOSED
            InvalidInputError: INVALID_AMOUNT
        """
        if data.order_id is not None:
            expense, _ = await self.orders.register_payment(
                db,
                data.order_id,
                OrderPaymentCreate(
                    amount=data.amount,
                    description=data.description,
                    payment_method=data.payment_method,
                ),
            )
            return expense

        project_id = None
        if data.quote_id is not None:
            quote = await db.get(Quote, data.quote_id)
            if quote is None:
                raise NotFoundError("Cotización no encontrada", error_code="QUOTE_NOT_FOUND")
            project_id = quote.project_id

        if project_id is not None:
            project = await db.get(Project, project_id)
            if project is not None and is_closed(project.status):
                logger.warning("Pago rechazado, proyecto %s CERRADO", project_id)
                raise BusinessRuleViolation(
                    "El proyecto está CERRADO. No se pueden registrar pagos.",
                    error_code="PROJECT_CLOSED",
                )

        if data.supplier_id is not None and await db.get(Supplier, data.supplier_id) is None:
            raise NotFoundError("Proveedor no encontrado", error_code="SUPPLIER_NOT_FOUND")

        amount = round_money(data.amount)
        if amount <= 0:
            raise InvalidInputError("El monto debe ser mayor a 0", error_code="INVALID_AMOUNT")

        expense = VariableExpense(
            amount=amount,
            iva=round_money(data.iva),
            category=self.orders.policy.expense_category,
            date=utcnow(),
            description=data.description or DEFAULT_DESCRIPTION,
            payment_method=data.payment_method or self.orders.policy.default_payment_method,
            supplier_id=data.supplier_id,
            project_id=project_id,
            quote_id=data.quote_id,
        )
        db.add(expense)
        await db.flush()

        paths = ["/accounting", "/dashboard"]
        if project_id is not None:
            paths.append(f"/projects/{project_id}")
        if data.supplier_id is not None:
            paths.extend(["/suppliers", f"/suppliers/{data.supplier_id}"])
        mark_stale(db, *paths)

        logger.info("Pago genérico registrado: cotización=%s monto=%s", data.quote_id, amount)
        return expense


expense_service = ExpenseService(supplier_order_service)
