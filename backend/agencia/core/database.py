"""
Configuración de la base de datos - SQLAlchemy 2.0 Async
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Define engine, session factory y la dependencia de sesión para FastAPI.
"""

import logging
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from agencia.core.config import settings

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# Engine Async SQLAlchemy 2.0
# ------------------------------------------------------------
engine_kwargs: dict[str, Any] = {
    "echo": settings.debug,
    "pool_pre_ping": True,
}

# SQLite no admite pool_size/max_overflow
if not settings.is_sqlite:
    engine_kwargs["pool_size"] = settings.db_pool_size
    engine_kwargs["max_overflow"] = settings.db_max_overflow

engine: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)


# ------------------------------------------------------------
# Session Factory
# ------------------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependencia de FastAPI: una sesión por petición.

    El router hace commit al terminar la operación; cualquier excepción
    deshace la transacción completa.

    Yields:
        AsyncSession: Sesión de base de datos async
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Verifica que la base de datos sea accesible."""
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Conexión a la base de datos establecida")
    except Exception as e:
        logger.error("Error de conexión a la base de datos: %s", e)
        raise


async def close_db() -> None:
    """Cierra las conexiones del pool. Se llama durante el shutdown."""
    await engine.dispose()
    logger.info("Conexiones a la base de datos cerradas")
