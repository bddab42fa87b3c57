"""
Unit tests for PaymentService.

Verifica la normalizzazione dell'importo per tipo di pagamento e la
registrazione con importo originale conservato.
"""

from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import BusinessValidationError
from app.models import PaymentType
from app.schemas.payment import PaymentCreate
from app.services.payment_service import PaymentService


@pytest.fixture
def service():
    return PaymentService(tax_exclusive_types=["check"], tax_divisor=Decimal("1.19"))


def _data(**overrides):
    values = {
        "client_id": 1,
        "payment_date": date(2025, 3, 15),
        "original_amount": Decimal("119.00"),
        "payment_type_id": 2,
    }
    values.update(overrides)
    return PaymentCreate(**values)


# ============================================================
# Tests for normalize_amount
# ============================================================


class TestNormalizeAmount:
    """Tests for PaymentService.normalize_amount()."""

    def test_check_is_tax_exclusive(self, service):
        """Test assegno da 119.00 registrato come 100.00."""
        assert service.normalize_amount(Decimal("119.00"), "check") == Decimal("100.00")

    def test_check_rounding_half_up(self, service):
        """Test arrotondamento al centesimo: 100 / 1.19 = 84.0336..."""
        assert service.normalize_amount(Decimal("100"), "check") == Decimal("84.03")

    def test_type_name_case_insensitive(self, service):
        """Test nome del tipo confrontato in minuscolo."""
        assert service.normalize_amount(Decimal("119.00"), " CHECK ") == Decimal("100.00")

    def test_cash_unchanged(self, service):
        """Test contanti: importo invariato (quantizzato)."""
        assert service.normalize_amount(Decimal("50"), "cash") == Decimal("50.00")
        assert service.normalize_amount(Decimal("10.005"), "cash") == Decimal("10.01")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_rejected(self, service, amount):
        """Test importo non positivo."""
        with pytest.raises(BusinessValidationError):
            service.normalize_amount(amount, "cash")

    def test_configurable_types_and_divisor(self):
        """Test tipi e divisore configurabili."""
        custom = PaymentService(tax_exclusive_types=["Transfer"], tax_divisor=Decimal("1.10"))

        assert custom.normalize_amount(Decimal("110"), "transfer") == Decimal("100.00")
        assert custom.normalize_amount(Decimal("110"), "check") == Decimal("110.00")


# ============================================================
# Tests for record()
# ============================================================


class TestRecord:
    """Tests for PaymentService.record()."""

    @pytest.mark.asyncio
    async def test_records_normalized_and_original(self, service, mock_db, make_result):
        """Test importo normalizzato e originale entrambi registrati."""
        mock_db.execute.side_effect = [
            make_result(scalar=1),
            make_result(scalar=PaymentType(id=2, name="check")),
        ]

        payment = await service.record(mock_db, _data(notes="assegno n. 4411"))

        mock_db.add.assert_called_once_with(payment)
        assert payment.amount == Decimal("100.00")
        assert payment.original_amount == Decimal("119.00")
        assert payment.payment_type_id == 2
        assert payment.currency == "DA"
        assert payment.notes == "assegno n. 4411"

    @pytest.mark.asyncio
    async def test_explicit_currency(self, service, mock_db, make_result):
        """Test valuta esplicita normalizzata in maiuscolo."""
        mock_db.execute.side_effect = [
            make_result(scalar=1),
            make_result(scalar=PaymentType(id=1, name="cash")),
        ]

        payment = await service.record(mock_db, _data(currency="eur", payment_type_id=1))

        assert payment.currency == "EUR"
        assert payment.amount == Decimal("119.00")

    @pytest.mark.asyncio
    async def test_unknown_payment_type(self, service, mock_db, make_result):
        """Test tipo di pagamento inesistente."""
        mock_db.execute.side_effect = [make_result(scalar=1), make_result(scalar=None)]

        with pytest.raises(BusinessValidationError, match="Tipo di pagamento"):
            await service.record(mock_db, _data(payment_type_id=99))
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_client(self, service, mock_db, make_result):
        """Test cliente inesistente."""
        mock_db.execute.side_effect = [make_result(scalar=None)]

        with pytest.raises(BusinessValidationError, match="Cliente"):
            await service.record(mock_db, _data(client_id=404))

    @pytest.mark.asyncio
    async def test_non_positive_amount(self, service, mock_db):
        """Test importo non positivo rifiutato prima di ogni query."""
        with pytest.raises(BusinessValidationError):
            await service.record(mock_db, _data(original_amount=Decimal("0")))
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_by_client(self, service, mock_db, make_result, mock_payment, compile_pg):
        """Test pagamenti del cliente dal più recente."""
        mock_db.execute.return_value = make_result(scalars=[mock_payment])

        payments = await service.list_by_client(mock_db, 1, start_date=date(2025, 1, 1))

        assert payments == [mock_payment]
        sql = compile_pg(mock_db.execute.call_args.args[0])
        assert "ORDER BY client_payments.payment_date DESC" in sql
