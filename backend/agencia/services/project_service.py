"""
Service Layer para los Proyectos
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Cierre financiero del proyecto: sólo se cierra cuando todas sus órdenes de
compra están pagadas. Con el proyecto CERRADO no se registran pagos ni se
generan órdenes.
"""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agencia.core.exceptions import BusinessRuleViolation, NotFoundError
from agencia.core.revalidation import mark_stale
from agencia.models import Project, SupplierOrder
from agencia.schemas.project import ClosureEligibility, ProjectCreate, ProjectStatus, is_closed
from agencia.schemas.supplier_order import PaymentStatus

logger = logging.getLogger(__name__)


class ProjectService:
    """Service para alta, consulta y cierre de proyectos."""

    def __init__(self) -> None:
        pass

    async def get_by_id(self, db: AsyncSession, project_id: uuid.UUID) -> Project:
        project = await db.get(Project, project_id)
        if not project:
            logger.warning("Proyecto no encontrado: %s", project_id)
            raise NotFoundError(
                f"Proyecto {project_id} no encontrado",
                error_code="PROJECT_NOT_FOUND",
            )
        return project

    async def create(self, db: AsyncSession, data: ProjectCreate) -> Project:
        """Crea un proyecto (por omisión en COTIZANDO)."""
        project = Project(name=data.name, status=data.status.value)
        db.add(project)
        await db.flush()
        mark_stale(db, "/projects")
        logger.info("Creado proyecto %s (%s)", project.id, project.status)
        return project

    async def get_closure_eligibility(
        self,
        db: AsyncSession,
        project_id: uuid.UUID,
    ) -> ClosureEligibility:
        """
        Indica si el proyecto se puede cerrar.

        No es elegible si ya está CERRADO o si alguna de sus órdenes de
        compra no está pagada (se informa cuántas).
        """
        project = await self.get_by_id(db, project_id)

        if is_closed(project.status):
            return ClosureEligibility(
                project_id=project.id,
                eligible=False,
                status=ProjectStatus(project.status),
                reason="El proyecto ya está CERRADO",
            )

        pending_query = select(func.count()).select_from(SupplierOrder).where(
            SupplierOrder.project_id == project.id,
            SupplierOrder.payment_status != PaymentStatus.PAID.value,
        )
        pending_count = (await db.execute(pending_query)).scalar() or 0

        if pending_count:
            return ClosureEligibility(
                project_id=project.id,
                eligible=False,
                pending_count=pending_count,
                status=ProjectStatus(project.status),
                reason=f"Hay {pending_count} órdenes de compra sin pagar",
            )

        return ClosureEligibility(
            project_id=project.id,
            eligible=True,
            status=ProjectStatus(project.status),
        )

    async def close(self, db: AsyncSession, project_id: uuid.UUID) -> Project:
        """
        Cierra el proyecto (estado CERRADO).

        Raises:
            NotFoundError: PROJECT_NOT_FOUND
            BusinessRuleViolation: PROJECT_NOT_ELIGIBLE
        """
        eligibility = await self.get_closure_eligibility(db, project_id)
        if not eligibility.eligible:
            logger.warning("Cierre rechazado: proyecto=%s motivo=%s", project_id, eligibility.reason)
            raise BusinessRuleViolation(
                f"No se puede cerrar el proyecto: {eligibility.reason}",
                error_code="PROJECT_NOT_ELIGIBLE",
                extra={"pending_count": eligibility.pending_count},
            )

        project = await self.get_by_id(db, project_id)
        project.status = ProjectStatus.CERRADO.value
        await db.flush()

        mark_stale(db, "/projects", f"/projects/{project.id}", "/accounting", "/dashboard")
        logger.info("Proyecto %s CERRADO", project.id)
        return project


project_service = ProjectService()
