"""
Invalidación de vistas en caché
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Los servicios marcan en la sesión las vistas que una mutación deja
obsoletas (`/supplier-orders`, `/accounting`, `/projects/{id}`, ...).
Las rutas acumuladas se despachan a los listeners registrados sólo cuando
la transacción hace commit; un rollback las descarta.

Usage:
    register_listener(lambda paths: cdn.purge(paths))
    mark_stale(db, "/supplier-orders", "/accounting")
"""

import logging
from typing import Callable, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import event
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

STALE_VIEWS_KEY = "stale_views"

Listener = Callable[[List[str]], None]

_listeners: List[Listener] = []


def register_listener(listener: Listener) -> None:
    """Registra un callback que recibe las rutas invalidadas tras cada commit."""
    _listeners.append(listener)


def unregister_listener(listener: Listener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def order_views(
    supplier_id: Optional[UUID] = None,
    project_id: Optional[UUID] = None,
) -> List[str]:
    """Vistas afectadas por cualquier mutación de una orden de compra."""
    paths = ["/suppliers", "/supplier-orders", "/accounting", "/dashboard"]
    if supplier_id is not None:
        paths.append(f"/suppliers/{supplier_id}")
    if project_id is not None:
        paths.append(f"/projects/{project_id}")
    return paths


def mark_stale(db, *paths: str) -> None:
    """
    Acumula rutas obsoletas en la sesión (AsyncSession o Session).

    Args:
        db: Sesión de base de datos
        paths: Rutas de vistas a invalidar
    """
    pending = db.info.setdefault(STALE_VIEWS_KEY, [])
    for path in paths:
        if path not in pending:
            pending.append(path)


def _dispatch(paths: Iterable[str]) -> None:
    paths = list(paths)
    if not _listeners:
        logger.debug("Vistas obsoletas (sin listeners): %s", paths)
        return
    for listener in list(_listeners):
        try:
            listener(paths)
        except Exception:
            # Un listener roto no debe deshacer una transacción ya confirmada
            logger.error("Error en listener de invalidación", exc_info=True)


# ------------------------------------------------------------
# Event Listeners
# ------------------------------------------------------------
@event.listens_for(Session, "after_commit")
def dispatch_stale_views(session: Session) -> None:
    """Despacha las vistas obsoletas acumuladas una vez confirmado el commit."""
    paths = session.info.pop(STALE_VIEWS_KEY, None)
    if paths:
        _dispatch(paths)


@event.listens_for(Session, "after_rollback")
def discard_stale_views(session: Session) -> None:
    """Descarta las vistas acumuladas: la mutación no se confirmó."""
    session.info.pop(STALE_VIEWS_KEY, None)
