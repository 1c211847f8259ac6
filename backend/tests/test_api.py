"""
Pruebas de los endpoints HTTP.

Verifican la forma uniforme de las respuestas: `{success: true, ...datos}`
o `{success: false, error, error_code}`.
"""

import uuid
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from agencia.services.supplier_order_service import supplier_order_service


# ===================== HEALTH =====================


async def test_health(client):
    """Test el endpoint de salud responde."""
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


# ===================== ÓRDENES =====================


async def test_list_orders(client, seed):
    """Test lista paginada con total calculado."""
    r = await client.get("/api/v1/supplier-orders/")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["total"] == 1
    assert body["total_pages"] == 1
    assert Decimal(body["items"][0]["total"]) == Decimal("200")


async def test_get_order_not_found(client, seed):
    """Test orden inexistente devuelve 404 uniforme."""
    r = await client.get(f"/api/v1/supplier-orders/{uuid.uuid4()}")
    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert body["error_code"] == "ORDER_NOT_FOUND"
    assert "no encontrada" in body["error"]


async def test_create_order(client, seed):
    """Test alta de orden con estados iniciales."""
    r = await client.post(
        "/api/v1/supplier-orders/",
        json={
            "supplier_id": str(seed["supplier"].id),
            "project_id": str(seed["project"].id),
            "items": [{"code": "LONA-32", "name": "Lona", "quantity": 3, "unitCost": 55}],
        },
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["order"]["status"] == "PENDING"
    assert body["order"]["payment_status"] == "PENDING"
    assert Decimal(body["order"]["total"]) == Decimal("165")


async def test_create_order_with_invalid_items(client, seed):
    """Test partidas inválidas devuelven INVALID_ITEMS."""
    r = await client.post(
        "/api/v1/supplier-orders/",
        json={
            "supplier_id": str(seed["supplier"].id),
            "items": [{"name": "Lona", "quantity": -1, "unitCost": 55}],
        },
    )
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["error_code"] == "INVALID_ITEMS"


async def test_register_payment(client, seed):
    """Test pago parcial y consulta del libro."""
    order_id = seed["order"].id
    r = await client.post(f"/api/v1/supplier-orders/{order_id}/payments", json={"amount": "150"})
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["balance"]["payment_status"] == "PARTIAL"
    assert Decimal(body["balance"]["pending_balance"]) == Decimal("50")
    assert Decimal(body["expense"]["iva"]) == Decimal("24")

    r = await client.get(f"/api/v1/supplier-orders/{order_id}/payments")
    assert r.status_code == 200
    assert len(r.json()["payments"]) == 1


async def test_register_payment_exceeding_balance(client, seed):
    """Test sobrepago devuelve 409 con el saldo pendiente."""
    r = await client.post(
        f"/api/v1/supplier-orders/{seed['order'].id}/payments",
        json={"amount": "250"},
    )
    assert r.status_code == 409
    assert r.json() == {
        "success": False,
        "error": "El pago ($250.00) excede el saldo pendiente ($200.00)",
        "error_code": "AMOUNT_EXCEEDS_BALANCE",
        "pending_balance": "200.00",
    }


async def test_register_payment_non_positive(client, seed):
    """Test monto negativo devuelve INVALID_AMOUNT."""
    r = await client.post(
        f"/api/v1/supplier-orders/{seed['order'].id}/payments",
        json={"amount": "-5"},
    )
    assert r.status_code == 422
    assert r.json()["error_code"] == "INVALID_AMOUNT"


async def test_balance(client, seed):
    """Test saldo de una orden sin pagos."""
    r = await client.get(f"/api/v1/supplier-orders/{seed['order'].id}/balance")
    assert r.status_code == 200
    balance = r.json()["balance"]
    assert Decimal(balance["total_ordered"]) == Decimal("200")
    assert Decimal(balance["total_paid"]) == Decimal("0")
    assert balance["is_settled"] is False


async def test_payment_status_override(client, seed):
    """Test override manual a PAID."""
    r = await client.patch(
        f"/api/v1/supplier-orders/{seed['order'].id}/payment-status",
        json={"payment_status": "PAID"},
    )
    assert r.status_code == 200
    assert r.json()["order"]["payment_status"] == "PAID"


async def test_payment_status_override_unknown_status(client, seed):
    """Test estado de pago desconocido."""
    r = await client.patch(
        f"/api/v1/supplier-orders/{seed['order'].id}/payment-status",
        json={"payment_status": "PAGADO"},
    )
    assert r.status_code == 422
    assert r.json()["error_code"] == "INVALID_PAYMENT_STATUS"


async def test_order_from_quote_item_twice(client, seed):
    """Test la segunda orden para la misma partida devuelve 409."""
    payload = {
        "quote_item_id": str(seed["quote_item"].id),
        "supplier_id": str(seed["supplier"].id),
    }
    r = await client.post("/api/v1/supplier-orders/from-quote-item", json=payload)
    assert r.status_code == 201
    assert r.json()["order"]["quote_item_id"] == payload["quote_item_id"]

    r = await client.post("/api/v1/supplier-orders/from-quote-item", json=payload)
    assert r.status_code == 409
    assert r.json()["error_code"] == "ORDER_ALREADY_EXISTS"


async def test_status_transition(client, seed):
    """Test transición inválida y luego válida."""
    url = f"/api/v1/supplier-orders/{seed['order'].id}/status"
    r = await client.patch(url, json={"status": "RECEIVED"})
    assert r.status_code == 409
    assert r.json()["error_code"] == "INVALID_STATUS_TRANSITION"

    r = await client.patch(url, json={"status": "ORDERED"})
    assert r.status_code == 200
    assert r.json()["order"]["status"] == "ORDERED"


async def test_duplicate_and_delete(client, seed):
    """Test duplicar una orden y eliminar la copia."""
    r = await client.post(f"/api/v1/supplier-orders/{seed['order'].id}/duplicate")
    assert r.status_code == 201
    copy_id = r.json()["order"]["id"]

    r = await client.delete(f"/api/v1/supplier-orders/{copy_id}")
    assert r.status_code == 200
    assert r.json() == {"success": True, "deleted_id": copy_id}


async def test_register_payment_oversized_amount(client, seed):
    """Test un monto que no cabe en la columna devuelve 422, no 500."""
    r = await client.post(
        f"/api/v1/supplier-orders/{seed['order'].id}/payments",
        json={"amount": "1e30"},
    )
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["error_code"] == "INVALID_INPUT"


async def test_create_order_with_oversized_cost(client, seed):
    """Test un costo unitario enorme devuelve INVALID_ITEMS."""
    r = await client.post(
        "/api/v1/supplier-orders/",
        json={
            "supplier_id": str(seed["supplier"].id),
            "items": [{"code": "LONA-32", "name": "Lona", "quantity": 1, "unitCost": "1e30"}],
        },
    )
    assert r.status_code == 422
    assert r.json()["error_code"] == "INVALID_ITEMS"


async def test_update_order_unknown_quote(client, seed):
    """Test editar la orden con una cotización inexistente devuelve 404."""
    r = await client.put(
        f"/api/v1/supplier-orders/{seed['order'].id}",
        json={"quote_id": str(uuid.uuid4())},
    )
    assert r.status_code == 404
    assert r.json()["error_code"] == "QUOTE_NOT_FOUND"


# ===================== PROVEEDORES =====================


async def test_supplier_crud(client):
    """Test alta, consulta, cambio de nombre y baja de un proveedor."""
    r = await client.post("/api/v1/suppliers/", json={"name": "  Papelera Norte "})
    assert r.status_code == 201
    supplier = r.json()["supplier"]
    assert supplier["name"] == "Papelera Norte"

    r = await client.put(f"/api/v1/suppliers/{supplier['id']}", json={"name": "Papelera del Norte"})
    assert r.status_code == 200
    assert r.json()["supplier"]["name"] == "Papelera del Norte"

    r = await client.get(f"/api/v1/suppliers/{supplier['id']}")
    assert r.json()["supplier"]["name"] == "Papelera del Norte"

    r = await client.delete(f"/api/v1/suppliers/{supplier['id']}")
    assert r.json() == {"success": True, "deleted_id": supplier["id"]}

    r = await client.get(f"/api/v1/suppliers/{supplier['id']}")
    assert r.status_code == 404
    assert r.json()["error_code"] == "SUPPLIER_NOT_FOUND"


async def test_supplier_list_and_order_flow(client, seed):
    """Test un proveedor creado por la API sirve para crear órdenes."""
    r = await client.post("/api/v1/suppliers/", json={"name": "Acrílicos Luna"})
    supplier_id = r.json()["supplier"]["id"]

    r = await client.get("/api/v1/suppliers/")
    body = r.json()
    assert body["success"] is True
    assert [s["name"] for s in body["items"]] == ["Acrílicos Luna", "Imprenta Sol"]

    r = await client.post(
        "/api/v1/supplier-orders/",
        json={"supplier_id": supplier_id, "items": [{"code": "ACR-1", "quantity": 1, "unitCost": 10}]},
    )
    assert r.status_code == 201

    r = await client.delete(f"/api/v1/suppliers/{supplier_id}")
    assert r.status_code == 409
    assert r.json()["error_code"] == "SUPPLIER_HAS_ORDERS"


async def test_supplier_empty_name(client):
    """Test nombre vacío."""
    r = await client.post("/api/v1/suppliers/", json={"name": "   "})
    assert r.status_code == 422
    assert r.json()["error_code"] == "INVALID_INPUT"


# ===================== PROYECTOS Y EGRESOS =====================


async def test_project_closure_flow(client, seed):
    """Test cierre del proyecto tras liquidar sus órdenes."""
    project_id = seed["project"].id

    r = await client.post(f"/api/v1/projects/{project_id}/close")
    assert r.status_code == 409
    assert r.json()["error_code"] == "PROJECT_NOT_ELIGIBLE"

    await client.post(f"/api/v1/supplier-orders/{seed['order'].id}/payments", json={"amount": "200"})

    r = await client.get(f"/api/v1/projects/{project_id}/closure-eligibility")
    assert r.json()["eligibility"]["eligible"] is True

    r = await client.post(f"/api/v1/projects/{project_id}/close")
    assert r.status_code == 200
    assert r.json()["project"]["status"] == "CERRADO"

    r = await client.post(
        "/api/v1/supplier-orders/from-quote-item",
        json={"quote_item_id": str(seed["quote_item"].id), "supplier_id": str(seed["supplier"].id)},
    )
    assert r.status_code == 409
    assert r.json()["error_code"] == "PROJECT_CLOSED"


async def test_supplier_payment_requires_target(client, seed):
    """Test pago genérico sin orden, cotización ni proveedor."""
    r = await client.post("/api/v1/expenses/supplier-payments", json={"amount": "10"})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["error_code"] == "INVALID_INPUT"


async def test_supplier_payment_on_quote(client, seed):
    """Test pago genérico contra una cotización."""
    r = await client.post(
        "/api/v1/expenses/supplier-payments",
        json={"amount": "10", "quote_id": str(seed["quote"].id)},
    )
    assert r.status_code == 201
    assert r.json()["expense"]["description"] == "Pago registrado"


# ===================== FALLOS INESPERADOS =====================


async def test_store_failure_is_transient(client, seed, monkeypatch):
    """Test un fallo del almacén devuelve 503 reintentable."""
    async def broken(db, order_id):
        raise OperationalError("SELECT", {}, Exception("conexión perdida"))

    monkeypatch.setattr(supplier_order_service, "get_balance", broken)

    r = await client.get(f"/api/v1/supplier-orders/{seed['order'].id}/balance")
    assert r.status_code == 503
    assert r.json() == {
        "success": False,
        "error": "Error de base de datos. Intente de nuevo.",
        "error_code": "STORE_UNAVAILABLE",
    }


async def test_unexpected_error_is_generic(client, seed, monkeypatch):
    """Test un error inesperado devuelve el mensaje genérico."""
    async def broken(db, order_id):
        raise RuntimeError("fallo inesperado")

    monkeypatch.setattr(supplier_order_service, "get_balance", broken)

    r = await client.get(f"/api/v1/supplier-orders/{seed['order'].id}/balance")
    assert r.status_code == 500
    assert r.json()["success"] is False
    assert r.json()["error"] == "Error interno del servidor"
