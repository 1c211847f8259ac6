"""
Main Entry Point - FastAPI Application
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Configura la aplicación FastAPI con middleware, routers, lifecycle y los
handlers que convierten cualquier error en la forma uniforme
`{success: false, error, error_code}`.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from agencia.core.config import settings
from agencia.core.database import close_db, init_db
from agencia.core.exceptions import AppException, TransientFailure

# ------------------------------------------------------------
# Configuración Logging
# ------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Lifespan Handler
# ------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Ciclo de vida de la aplicación.

    - Startup: verifica la conexión a la base de datos
    - Shutdown: cierra las conexiones
    """
    logger.info("Iniciando %s v%s", settings.app_name, settings.app_version)
    await init_db()
    logger.info("Aplicación iniciada")

    yield

    logger.info("Deteniendo la aplicación...")
    await close_db()
    logger.info("Aplicación detenida")


# ------------------------------------------------------------
# FastAPI Application
# ------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    description="Órdenes de compra y pagos a proveedores - Backend API",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ------------------------------------------------------------
# Exception Handlers
# ------------------------------------------------------------
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Errores de dominio: status code de la excepción y forma uniforme."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_result(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Errores de formato de la petición (pydantic).

    Los errores en las partidas de la orden se reportan como INVALID_ITEMS.
    """
    details = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
        for error in exc.errors()
    ]
    error_code = "INVALID_INPUT"
    if any("items" in detail["loc"] for detail in details):
        error_code = "INVALID_ITEMS"

    message = details[0]["msg"] if details else "Datos inválidos"
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": f"Datos inválidos: {message}",
            "error_code": error_code,
            "details": details,
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Fallos del almacén no capturados en los services: error genérico transitorio."""
    logger.error("Error de base de datos: %s - %s", exc.__class__.__name__, exc, exc_info=True)
    failure = TransientFailure()
    return JSONResponse(
        status_code=failure.status_code,
        content=failure.to_result(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler genérico para excepciones no capturadas.

    Registra el error y responde HTTP 500 con un mensaje genérico.
    """
    logger.error("Excepción no controlada: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Error interno del servidor",
            "error_code": "INTERNAL_SERVER_ERROR",
        },
    )


# ------------------------------------------------------------
# Middleware CORS
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------
@app.get(
    "/health",
    name="Health Check",
    summary="Estado de la aplicación",
    tags=["System"],
)
async def health_check() -> dict[str, str]:
    """
    Endpoint de estado de salud.

    Returns:
        dict: Estado de la aplicación
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
        "currency": settings.currency,
    }


# ------------------------------------------------------------
# Router
# ------------------------------------------------------------
from agencia.api.v1 import api_v1_router

app.include_router(api_v1_router)
