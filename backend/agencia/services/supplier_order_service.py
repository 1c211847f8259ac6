"""
Service Layer para las Órdenes de Compra
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Punto único de entrada para registrar pagos a proveedores y para crear,
duplicar y eliminar órdenes de compra. Mantiene el estado de pago de cada
orden consistente con el libro de egresos.

Todas las validaciones ocurren antes de cualquier escritura. El service hace
flush; el router hace commit, de modo que cada operación es una sola
transacción.
"""

import logging
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agencia.core.config import PaymentPolicy, settings
from agencia.core.exceptions import (
    BusinessRuleViolation,
    InvalidInputError,
    NotFoundError,
    TransientFailure,
)
from agencia.core.revalidation import mark_stale, order_views
from agencia.models import Project, Quote, QuoteItem, Supplier, SupplierOrder, VariableExpense
from agencia.models.mixins import utcnow
from agencia.models.types import round_money
from agencia.schemas.project import (
    COST_SYNC_QUOTE_STATUSES,
    NOT_APPROVED_STATUSES,
    is_closed,
)
from agencia.schemas.supplier_order import (
    VALID_STATUS_TRANSITIONS,
    OrderBalance,
    OrderFromQuoteItemCreate,
    OrderItem,
    OrderPaymentCreate,
    OrderStatus,
    PaymentStatus,
    PaymentStatusSource,
    SupplierOrderCreate,
    SupplierOrderUpdate,
    parse_order_items,
)
from agencia.services.cost_calculator import compute_order_total
from agencia.services.payment_ledger import (
    build_balance,
    derive_payment_status,
    load_ledger,
    total_paid,
)

logger = logging.getLogger(__name__)

# Código que reciben las partidas sin código de producto
PLACEHOLDER_CODE = "N/A"


class SupplierOrderService:
    """
    Service para el ciclo de vida de las órdenes de compra.

    Recibe la política de pagos (IVA, tolerancia, categoría y forma de pago
    por omisión) en el constructor.
    """

    def __init__(self, policy: PaymentPolicy) -> None:
        self.policy = policy

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    async def _get_order(
        self,
        db: AsyncSession,
        order_id: uuid.UUID,
        for_update: bool = False,
    ) -> SupplierOrder:
        query = select(SupplierOrder).where(SupplierOrder.id == order_id)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        order = result.scalar_one_or_none()

        if not order:
            logger.warning("Orden de compra no encontrada: %s", order_id)
            raise NotFoundError(
                f"Orden de compra {order_id} no encontrada",
                error_code="ORDER_NOT_FOUND",
            )
        return order

    async def _get_project(
        self,
        db: AsyncSession,
        project_id: Optional[uuid.UUID],
    ) -> Optional[Project]:
        if project_id is None:
            return None
        return await db.get(Project, project_id)

    async def _get_supplier(self, db: AsyncSession, supplier_id: uuid.UUID) -> Supplier:
        supplier = await db.get(Supplier, supplier_id)
        if not supplier:
            logger.warning("Proveedor no encontrado: %s", supplier_id)
            raise NotFoundError(
                f"Proveedor {supplier_id} no encontrado",
                error_code="SUPPLIER_NOT_FOUND",
            )
        return supplier

    def _check_project_open(self, project: Optional[Project], action: str) -> None:
        """Rechaza cualquier mutación financiera sobre un proyecto CERRADO."""
        if project is not None and is_closed(project.status):
            logger.warning("Operación rechazada, proyecto %s CERRADO", project.id)
            raise BusinessRuleViolation(
                f"El proyecto está CERRADO. {action}",
                error_code="PROJECT_CLOSED",
            )

    async def _flush(self, db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Error de base de datos al %s: %s - %s", action, e.__class__.__name__, e)
            await db.rollback()
            raise TransientFailure() from e

    def _apply_payment_status(
        self,
        order: SupplierOrder,
        new_status: PaymentStatus,
        source: PaymentStatusSource,
    ) -> None:
        """
        Única transición del estado de pago.

        Los cambios con origen MANUAL_OVERRIDE no pasan por la validación del
        libro y quedan registrados en el log como auditoría.
        """
        previous = order.payment_status
        order.payment_status = new_status.value

        if source is PaymentStatusSource.MANUAL_OVERRIDE:
            logger.warning(
                "Override manual del estado de pago: orden=%s %s -> %s",
                order.id, previous, new_status.value,
            )
        else:
            logger.debug(
                "Estado de pago derivado del libro: orden=%s %s -> %s",
                order.id, previous, new_status.value,
            )

    async def _sync_quote_costs(self, db: AsyncSession, items: list[OrderItem]) -> int:
        """
        Propaga el costo unitario de cada partida a las partidas de cotización
        con el mismo código cuya cotización está en DRAFT o SAVED.

        Returns:
            int: Número de partidas de cotización actualizadas
        """
        draft_quotes = select(Quote.id).where(Quote.status.in_(COST_SYNC_QUOTE_STATUSES))
        synced = 0
        try:
            for item in items:
                if not item.code or item.code == PLACEHOLDER_CODE:
                    continue
                if item.unit_cost is None or item.unit_cost <= 0:
                    continue
                stmt = (
                    update(QuoteItem)
                    .where(
                        QuoteItem.product_code == item.code,
                        QuoteItem.quote_id.in_(draft_quotes),
                    )
                    .values(cost_article=round_money(item.unit_cost), updated_at=utcnow())
                    .execution_options(synchronize_session="fetch")
                )
                result = await db.execute(stmt)
                synced += result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Error al sincronizar costos de cotización: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise TransientFailure() from e

        if synced:
            logger.info("Costo de artículo sincronizado en %d partidas de cotización", synced)
        return synced

    # ------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------

    async def get_all(
        self,
        db: AsyncSession,
        supplier_id: Optional[uuid.UUID] = None,
        project_id: Optional[uuid.UUID] = None,
        status_filter: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[SupplierOrder], int]:
        """
        Lista paginada de órdenes de compra, más recientes primero.

        Returns:
            Tuple de (lista de órdenes, total)
        """
        conditions = []
        if supplier_id:
            conditions.append(SupplierOrder.supplier_id == supplier_id)
        if project_id:
            conditions.append(SupplierOrder.project_id == project_id)
        if status_filter:
            conditions.append(SupplierOrder.status == status_filter.value)
        if payment_status:
            conditions.append(SupplierOrder.payment_status == payment_status.value)

        query = select(SupplierOrder)
        count_query = select(func.count()).select_from(SupplierOrder)
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        query = (
            query.order_by(SupplierOrder.created_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await db.execute(query)
        orders = list(result.scalars().all())

        total = (await db.execute(count_query)).scalar() or 0
        logger.debug("Recuperadas %d órdenes de compra de %d", len(orders), total)
        return orders, total

    async def get_by_id(self, db: AsyncSession, order_id: uuid.UUID) -> SupplierOrder:
        return await self._get_order(db, order_id)

    async def get_balance(self, db: AsyncSession, order_id: uuid.UUID) -> OrderBalance:
        """Saldo de la orden calculado desde el libro de egresos."""
        order = await self._get_order(db, order_id)
        entries = await load_ledger(db, order.id)
        return build_balance(order, entries, self.policy.epsilon)

    async def get_payments(self, db: AsyncSession, order_id: uuid.UUID) -> list[VariableExpense]:
        order = await self._get_order(db, order_id)
        return await load_ledger(db, order.id)

    # ------------------------------------------------------------
    # Pagos
    # ------------------------------------------------------------

    async def register_payment(
        self,
        db: AsyncSession,
        order_id: uuid.UUID,
        data: OrderPaymentCreate,
    ) -> tuple[VariableExpense, OrderBalance]:
        """
        Registra un pago contra una orden de compra.

        La orden se bloquea (SELECT ... FOR UPDATE) y el saldo se calcula
        dentro de la misma transacción, así dos pagos concurrentes no pueden
        exceder el total.

        Args:
            db: Sesión de base de datos
            order_id: UUID de la orden
            data: Monto, descripción y forma de pago

        Returns:
            Tuple de (asiento creado, saldo resultante)

        Raises:
            NotFoundError: ORDER_NOT_FOUND
            BusinessRuleViolation: PROJECT_CLOSED, AMOUNT_EXCEEDS_BALANCE
            InvalidInputError: INVALID_AMOUNT
        """
        order = await self._get_order(db, order_id, for_update=True)

        project = await self._get_project(db, order.project_id)
        self._check_project_open(project, "No se pueden registrar pagos.")

        if data.amount <= 0:
            logger.warning("Pago rechazado, monto no positivo: orden=%s monto=%s", order_id, data.amount)
            raise InvalidInputError("El monto debe ser mayor a 0", error_code="INVALID_AMOUNT")

        entries = await load_ledger(db, order.id)
        balance = build_balance(order, entries, self.policy.epsilon)
        pending = balance.pending_balance

        # El saldo se compara con el monto recibido, antes de redondearlo
        if pending <= 0 or data.amount > pending + self.policy.epsilon:
            logger.warning(
                "Pago rechazado, excede el saldo: orden=%s monto=%s pendiente=%s",
                order_id, data.amount, pending,
            )
            raise BusinessRuleViolation(
                f"El pago (${data.amount:,.2f}) excede el saldo pendiente (${pending:,.2f})",
                error_code="AMOUNT_EXCEEDS_BALANCE",
                extra={"pending_balance": str(round_money(pending))},
            )

        amount = round_money(data.amount)

        supplier = await db.get(Supplier, order.supplier_id)
        supplier_name = supplier.name if supplier else "Proveedor"

        expense = VariableExpense(
            amount=amount,
            iva=round_money(amount * self.policy.vat_rate),
            category=self.policy.expense_category,
            date=utcnow(),
            description=data.description or f"Pago Orden: {supplier_name}",
            payment_method=data.payment_method or self.policy.default_payment_method,
            supplier_id=order.supplier_id,
            supplier_order_id=order.id,
            project_id=order.project_id,
            quote_id=order.quote_id,
        )
        db.add(expense)

        new_paid = balance.total_paid + amount
        self._apply_payment_status(
            order,
            derive_payment_status(balance.total_ordered, new_paid, self.policy.epsilon),
            PaymentStatusSource.LEDGER,
        )

        await self._flush(db, "registrar pago")
        mark_stale(db, *order_views(order.supplier_id, order.project_id))

        logger.info(
            "Pago registrado: orden=%s monto=%s estado=%s",
            order.id, amount, order.payment_status,
        )
        return expense, build_balance(order, [*entries, expense], self.policy.epsilon)

    async def update_payment_status(
        self,
        db: AsyncSession,
        order_id: uuid.UUID,
        new_status: str,
    ) -> SupplierOrder:
        """
        Fija el estado de pago manualmente (selector de estado heredado).

        Si el nuevo estado es PAID y la orden no tiene asientos, se sintetiza
        un único asiento de conciliación por el total de la orden.

        Raises:
            InvalidInputError: INVALID_PAYMENT_STATUS
            NotFoundError: ORDER_NOT_FOUND
            BusinessRuleViolation: PROJECT_CLOSED
        """
        try:
            status_value = PaymentStatus(new_status)
        except ValueError:
            logger.warning("Estado de pago inválido: %s", new_status)
            raise InvalidInputError(
                f"Estado de pago inválido: {new_status}",
                error_code="INVALID_PAYMENT_STATUS",
            )

        order = await self._get_order(db, order_id, for_update=True)
        project = await self._get_project(db, order.project_id)
        self._check_project_open(project, "No se puede modificar el estado de pago.")

        if status_value is PaymentStatus.PAID:
            entries = await load_ledger(db, order.id)
            total = round_money(order.total)
            if not entries and total > 0:
                supplier = await db.get(Supplier, order.supplier_id)
                supplier_name = supplier.name if supplier else "Proveedor"
                db.add(
                    VariableExpense(
                        amount=total,
                        iva=round_money(total * self.policy.vat_rate),
                        category=self.policy.expense_category,
                        date=utcnow(),
                        description=f"Orden de Compra: {supplier_name}",
                        payment_method=self.policy.default_payment_method,
                        supplier_id=order.supplier_id,
                        supplier_order_id=order.id,
                        project_id=order.project_id,
                        quote_id=order.quote_id,
                    )
                )
                logger.warning(
                    "Asiento de conciliación sintetizado: orden=%s monto=%s",
                    order.id, total,
                )

        self._apply_payment_status(order, status_value, PaymentStatusSource.MANUAL_OVERRIDE)

        await self._flush(db, "actualizar estado de pago")
        mark_stale(db, *order_views(order.supplier_id, order.project_id))
        return order

    # ------------------------------------------------------------
    # Creación y edición
    # ------------------------------------------------------------

    async def create_from_quote_item(
        self,
        db: AsyncSession,
        data: OrderFromQuoteItemCreate,
    ) -> SupplierOrder:
        """
        Genera la orden de compra de una partida de cotización.

        La partida se bloquea durante la transacción: como máximo una orden
        por partida.

        Raises:
            NotFoundError: ITEM_NOT_FOUND, SUPPLIER_NOT_FOUND, PROJECT_NOT_FOUND
            BusinessRuleViolation: NO_PROJECT, PROJECT_CLOSED,
                PROJECT_NOT_APPROVED, ORDER_ALREADY_EXISTS
        """
        result = await db.execute(
            select(QuoteItem).where(QuoteItem.id == data.quote_item_id).with_for_update()
        )
        quote_item = result.scalar_one_or_none()
        if not quote_item:
            logger.warning("Partida de cotización no encontrada: %s", data.quote_item_id)
            raise NotFoundError("Partida de cotización no encontrada", error_code="ITEM_NOT_FOUND")

        quote = await db.get(Quote, quote_item.quote_id)
        if quote is None or quote.project_id is None:
            logger.warning("Partida %s sin proyecto asociado", quote_item.id)
            raise BusinessRuleViolation(
                "La cotización no está ligada a un proyecto",
                error_code="NO_PROJECT",
            )

        supplier = await self._get_supplier(db, data.supplier_id)

        project = await self._get_project(db, quote.project_id)
        if project is None:
            raise NotFoundError("Proyecto no encontrado", error_code="PROJECT_NOT_FOUND")
        self._check_project_open(project, "No se pueden generar órdenes de compra.")

        if project.status in NOT_APPROVED_STATUSES:
            logger.warning("Proyecto %s no aprobado (estado=%s)", project.id, project.status)
            raise BusinessRuleViolation(
                f"El proyecto debe estar aprobado para generar órdenes de compra "
                f"(estado actual: {project.status})",
                error_code="PROJECT_NOT_APPROVED",
            )

        if quote_item.order_created:
            logger.warning("Partida %s ya tiene orden de compra", quote_item.id)
            raise BusinessRuleViolation(
                "Ya existe una orden de compra para esta partida",
                error_code="ORDER_ALREADY_EXISTS",
            )

        order = SupplierOrder(
            supplier_id=supplier.id,
            project_id=project.id,
            quote_id=quote.id,
            quote_item_id=quote_item.id,
            items=parse_order_items([
                {
                    "code": quote_item.product_code or PLACEHOLDER_CODE,
                    "name": quote_item.concept,
                    "quantity": quote_item.quantity,
                    "unitCost": quote_item.cost_article,
                }
            ]),
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
        )
        db.add(order)
        await self._flush(db, "generar orden desde cotización")

        quote_item.order_created = True
        quote_item.supplier_order_id = order.id
        await self._flush(db, "marcar partida de cotización")

        mark_stale(db, *order_views(order.supplier_id, order.project_id))
        logger.info("Orden %s generada desde la partida %s", order.id, quote_item.id)
        return order

    async def create(self, db: AsyncSession, data: SupplierOrderCreate) -> SupplierOrder:
        """
        Crea una orden de compra y sincroniza el costo de artículo en las
        cotizaciones abiertas.

        Raises:
            NotFoundError: SUPPLIER_NOT_FOUND, PROJECT_NOT_FOUND, QUOTE_NOT_FOUND
            BusinessRuleViolation: PROJECT_CLOSED
        """
        await self._get_supplier(db, data.supplier_id)

        if data.project_id is not None:
            project = await self._get_project(db, data.project_id)
            if project is None:
                raise NotFoundError("Proyecto no encontrado", error_code="PROJECT_NOT_FOUND")
            self._check_project_open(project, "No se pueden crear órdenes de compra.")

        if data.quote_id is not None and await db.get(Quote, data.quote_id) is None:
            raise NotFoundError("Cotización no encontrada", error_code="QUOTE_NOT_FOUND")

        items = list(data.items)
        order = SupplierOrder(
            supplier_id=data.supplier_id,
            project_id=data.project_id,
            quote_id=data.quote_id,
            task_id=data.task_id,
            items=items,
            expected_date=data.expected_date,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
        )
        db.add(order)
        await self._flush(db, "crear orden de compra")

        await self._sync_quote_costs(db, items)
        mark_stale(db, *order_views(order.supplier_id, order.project_id))

        logger.info("Creada orden de compra %s (total=%s)", order.id, order.total)
        return order

    async def update(
        self,
        db: AsyncSession,
        order_id: uuid.UUID,
        data: SupplierOrderUpdate,
    ) -> SupplierOrder:
        """
        Actualiza una orden de compra.

        NOTA: los estados no se cambian aquí; usar update_status() y
        update_payment_status().

        Si cambian las partidas, el nuevo total no puede quedar por debajo de
        lo ya pagado y el estado de pago se deriva de nuevo del libro.

        Raises:
            NotFoundError: ORDER_NOT_FOUND, PROJECT_NOT_FOUND, QUOTE_NOT_FOUND
            BusinessRuleViolation: PROJECT_CLOSED, ORDER_TOTAL_BELOW_PAID
        """
        order = await self._get_order(db, order_id, for_update=True)
        project = await self._get_project(db, order.project_id)
        self._check_project_open(project, "No se pueden modificar órdenes de compra.")

        update_data = data.model_dump(exclude_unset=True, exclude={"items"})

        new_project_id = update_data.get("project_id")
        if new_project_id is not None and new_project_id != order.project_id:
            new_project = await self._get_project(db, new_project_id)
            if new_project is None:
                raise NotFoundError("Proyecto no encontrado", error_code="PROJECT_NOT_FOUND")
            self._check_project_open(new_project, "No se pueden asignar órdenes de compra.")

        new_quote_id = update_data.get("quote_id")
        if new_quote_id is not None and new_quote_id != order.quote_id:
            if await db.get(Quote, new_quote_id) is None:
                logger.warning("Cotización no encontrada: %s", new_quote_id)
                raise NotFoundError("Cotización no encontrada", error_code="QUOTE_NOT_FOUND")

        new_items: Optional[list[OrderItem]] = None
        paid = Decimal("0")
        if "items" in data.model_fields_set and data.items is not None:
            new_items = list(data.items)
            new_total = compute_order_total(new_items)
            entries = await load_ledger(db, order.id)
            paid = total_paid(entry.amount for entry in entries)
            if paid > new_total + self.policy.epsilon:
                logger.warning(
                    "Edición rechazada: orden=%s nuevo total=%s pagado=%s",
                    order_id, new_total, paid,
                )
                raise BusinessRuleViolation(
                    f"El nuevo total (${new_total:,.2f}) es menor a lo ya pagado (${paid:,.2f})",
                    error_code="ORDER_TOTAL_BELOW_PAID",
                    extra={"total_paid": str(round_money(paid))},
                )

        for field, value in update_data.items():
            setattr(order, field, value)

        if new_items is not None:
            order.items = new_items
            if paid > 0:
                self._apply_payment_status(
                    order,
                    derive_payment_status(order.total, paid, self.policy.epsilon),
                    PaymentStatusSource.LEDGER,
                )

        await self._flush(db, "actualizar orden de compra")

        if new_items is not None:
            await self._sync_quote_costs(db, new_items)
        mark_stale(db, *order_views(order.supplier_id, order.project_id))

        logger.info("Actualizada orden de compra %s", order_id)
        return order

    async def duplicate(self, db: AsyncSession, order_id: uuid.UUID) -> SupplierOrder:
        """
        Duplica una orden: nueva identidad, estados en PENDING y sin asientos
        del libro.
        """
        source = await self._get_order(db, order_id)

        copy = SupplierOrder(
            supplier_id=source.supplier_id,
            quote_id=source.quote_id,
            task_id=source.task_id,
            items=list(source.items or []),
            expected_date=source.expected_date,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
        )
        db.add(copy)
        await self._flush(db, "duplicar orden de compra")
        mark_stale(db, *order_views(copy.supplier_id, copy.project_id))

        logger.info("Orden de compra %s duplicada como %s", order_id, copy.id)
        return copy

    async def update_status(
        self,
        db: AsyncSession,
        order_id: uuid.UUID,
        new_status: OrderStatus,
    ) -> SupplierOrder:
        """
        Cambia el estado de surtido usando la matriz VALID_STATUS_TRANSITIONS.

        Raises:
            NotFoundError: ORDER_NOT_FOUND
            BusinessRuleViolation: INVALID_STATUS_TRANSITION
        """
        order = await self._get_order(db, order_id, for_update=True)

        try:
            current_status = OrderStatus(order.status)
        except ValueError:
            logger.error("Estado inválido en la base de datos: %s", order.status)
            current_status = None

        if current_status is None or new_status not in VALID_STATUS_TRANSITIONS.get(current_status, []):
            logger.warning("Transición no permitida: %s -> %s", order.status, new_status.value)
            raise BusinessRuleViolation(
                f"Transición de '{order.status}' a '{new_status.value}' no permitida",
                error_code="INVALID_STATUS_TRANSITION",
            )

        order.status = new_status.value
        await self._flush(db, "cambiar estado de la orden")
        mark_stale(db, *order_views(order.supplier_id, order.project_id))

        logger.info("Orden %s: %s -> %s", order_id, current_status.value, new_status.value)
        return order

    async def delete(self, db: AsyncSession, order_id: uuid.UUID) -> None:
        """
        Elimina una orden sin pagos registrados.

        La partida de cotización que la originó queda libre para generar una
        nueva orden.

        Raises:
            NotFoundError: ORDER_NOT_FOUND
            BusinessRuleViolation: PROJECT_CLOSED, ORDER_HAS_PAYMENTS
        """
        order = await self._get_order(db, order_id, for_update=True)
        project = await self._get_project(db, order.project_id)
        self._check_project_open(project, "No se pueden eliminar órdenes de compra.")

        entries = await load_ledger(db, order.id)
        if entries:
            logger.warning("Orden %s con %d pagos, no se elimina", order_id, len(entries))
            raise BusinessRuleViolation(
                "La orden tiene pagos registrados y no se puede eliminar",
                error_code="ORDER_HAS_PAYMENTS",
                extra={"payments_count": len(entries)},
            )

        conditions = [QuoteItem.supplier_order_id == order.id]
        if order.quote_item_id is not None:
            conditions.append(QuoteItem.id == order.quote_item_id)
        result = await db.execute(select(QuoteItem).where(or_(*conditions)))
        for quote_item in result.scalars().all():
            quote_item.order_created = False
            quote_item.supplier_order_id = None
            logger.info("Partida de cotización %s liberada", quote_item.id)

        supplier_id, project_id = order.supplier_id, order.project_id
        await db.delete(order)
        await self._flush(db, "eliminar orden de compra")
        mark_stale(db, *order_views(supplier_id, project_id))

        logger.info("Eliminada orden de compra %s", order_id)


supplier_order_service = SupplierOrderService(PaymentPolicy.from_settings(settings))
