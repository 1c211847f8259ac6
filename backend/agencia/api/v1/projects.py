"""
Router FastAPI para los Proyectos
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)
"""

import uuid

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from agencia.core.database import get_db
from agencia.schemas.project import (
    ClosureEligibilityResult,
    ProjectCreate,
    ProjectRead,
    ProjectResult,
)
from agencia.services.project_service import project_service

router = APIRouter(
    prefix="/projects",
    tags=["Proyectos"],
)


@router.post(
    "/",
    name="proyecto_crea",
    summary="Crea proyecto",
    response_model=ProjectResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_project(
    data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
) -> ProjectResult:
    project = await project_service.create(db, data)
    await db.commit()
    return ProjectResult(project=ProjectRead.model_validate(project))


@router.get(
    "/{project_id}",
    name="proyecto_detalle",
    summary="Detalle de proyecto",
    response_model=ProjectResult,
)
async def get_project(
    project_id: uuid.UUID = Path(..., description="UUID del proyecto"),
    db: AsyncSession = Depends(get_db),
) -> ProjectResult:
    project = await project_service.get_by_id(db, project_id)
    return ProjectResult(project=ProjectRead.model_validate(project))


@router.get(
    "/{project_id}/closure-eligibility",
    name="proyecto_elegibilidad_cierre",
    summary="Elegibilidad para el cierre",
    description="Un proyecto se puede cerrar cuando todas sus órdenes de compra están pagadas.",
    response_model=ClosureEligibilityResult,
)
async def get_closure_eligibility(
    project_id: uuid.UUID = Path(..., description="UUID del proyecto"),
    db: AsyncSession = Depends(get_db),
) -> ClosureEligibilityResult:
    eligibility = await project_service.get_closure_eligibility(db, project_id)
    return ClosureEligibilityResult(eligibility=eligibility)


@router.post(
    "/{project_id}/close",
    name="proyecto_cierra",
    summary="Cierra el proyecto",
    description="Pasa el proyecto a CERRADO. Después no se registran pagos ni se generan órdenes.",
    response_model=ProjectResult,
)
async def close_project(
    project_id: uuid.UUID = Path(..., description="UUID del proyecto"),
    db: AsyncSession = Depends(get_db),
) -> ProjectResult:
    project = await project_service.close(db, project_id)
    await db.commit()
    return ProjectResult(project=ProjectRead.model_validate(project))
