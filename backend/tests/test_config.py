"""
Pruebas de la configuración y de la política de pagos.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from agencia.core.config import PaymentPolicy, Settings


def make_settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestSettings:
    """Tests para la configuración desde entorno."""

    def test_payment_defaults(self):
        """Test valores por omisión de la política de pagos."""
        settings = make_settings()
        assert settings.vat_rate == Decimal("0.16")
        assert settings.balance_epsilon == Decimal("0.01")
        assert settings.order_expense_category == "Material"
        assert settings.default_payment_method == "TRANSFER"
        assert settings.currency == "MXN"

    def test_comma_decimal(self):
        """Test decimales con coma."""
        assert make_settings(vat_rate="0,08").vat_rate == Decimal("0.08")

    @pytest.mark.parametrize("rate", ["1", "-0.1", "16"])
    def test_vat_rate_must_be_fraction(self, rate):
        """Test la tasa de IVA es una fracción entre 0 y 1."""
        with pytest.raises(ValidationError):
            make_settings(vat_rate=rate)

    def test_invalid_decimal(self):
        """Test texto no numérico."""
        with pytest.raises(ValidationError):
            make_settings(balance_epsilon="mucho")

    def test_negative_epsilon(self):
        """Test tolerancia negativa."""
        with pytest.raises(ValidationError):
            make_settings(balance_epsilon="-0.01")

    def test_sqlite_detection(self):
        """Test detección de URL SQLite."""
        assert make_settings(database_url="sqlite+aiosqlite:///:memory:").is_sqlite
        assert not make_settings(database_url="postgresql+asyncpg://u:p@db/agencia").is_sqlite

    def test_production_rejects_unsafe_values(self):
        """Test producción rechaza debug y credenciales por omisión."""
        with pytest.raises(ValidationError) as exc_info:
            make_settings(
                app_env="production",
                debug=True,
                database_url="postgresql+asyncpg://agencia_user:changeme@db/agencia",
            )
        message = str(exc_info.value)
        assert "changeme" in message
        assert "debug" in message

    def test_production_with_safe_values(self):
        """Test producción con valores seguros."""
        settings = make_settings(
            app_env="production",
            debug=False,
            database_url="postgresql+asyncpg://agencia:s3creto@db:5432/agencia",
            cors_origins=["https://agencia.example.com"],
        )
        assert settings.is_production


class TestPaymentPolicy:
    """Tests para la política de pagos inyectada en el servicio."""

    def test_from_settings(self):
        """Test la política se construye desde Settings."""
        policy = PaymentPolicy.from_settings(
            make_settings(vat_rate="0.08", balance_epsilon="0.05", order_expense_category="Insumos")
        )
        assert policy.vat_rate == Decimal("0.08")
        assert policy.epsilon == Decimal("0.05")
        assert policy.expense_category == "Insumos"

    def test_policy_is_immutable(self):
        """Test la política es inmutable."""
        policy = PaymentPolicy()
        with pytest.raises(ValidationError):
            policy.vat_rate = Decimal("0.5")

    async def test_service_uses_injected_rate(self, db_session, seed):
        """Test el servicio usa la tasa de IVA inyectada."""
        from agencia.schemas.supplier_order import OrderPaymentCreate
        from agencia.services.supplier_order_service import SupplierOrderService

        service = SupplierOrderService(PaymentPolicy(vat_rate=Decimal("0.08")))
        expense, _ = await service.register_payment(
            db_session, seed["order"].id, OrderPaymentCreate(amount=Decimal("100"))
        )
        assert expense.iva == Decimal("8.00")
