"""
Unit tests for LedgerService.

Verifica saldo, stato Credit/Debt e report consumi/pagamenti.
"""

from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import BusinessValidationError
from app.schemas.report import BalanceStatus, ReportGroupBy
from app.services.ledger_service import LedgerService

START = date(2025, 1, 1)
END = date(2025, 1, 31)


@pytest.fixture
def service():
    return LedgerService()


# ============================================================
# Tests for client_summary
# ============================================================


class TestClientSummary:
    """Tests for LedgerService.client_summary()."""

    @pytest.mark.asyncio
    async def test_empty_range_is_credit(self, service, mock_db, make_result):
        """Test nessun movimento e nessun pagamento: saldo 0, Credit."""
        mock_db.execute.return_value = make_result(one=(0, 0))

        summary = await service.client_summary(mock_db, 1, START, END)

        assert summary.total_consumption_value == Decimal("0.00")
        assert summary.total_payments == Decimal("0.00")
        assert summary.balance == Decimal("0.00")
        assert summary.status == BalanceStatus.CREDIT

    @pytest.mark.asyncio
    async def test_debt(self, service, mock_db, make_result):
        """Test pagamenti 500, consumi 620: saldo -120, Debt."""
        mock_db.execute.return_value = make_result(one=(Decimal("620.000"), Decimal("500.00")))

        summary = await service.client_summary(mock_db, 1, START, END)

        assert summary.balance == Decimal("-120.00")
        assert summary.status == BalanceStatus.DEBT

    @pytest.mark.asyncio
    async def test_exact_balance_is_credit(self, service, mock_db, make_result):
        """Test saldo esattamente zero: Credit."""
        mock_db.execute.return_value = make_result(one=(Decimal("300.00"), Decimal("300.00")))

        summary = await service.client_summary(mock_db, 1, START, END)

        assert summary.status == BalanceStatus.CREDIT

    @pytest.mark.asyncio
    async def test_single_day_range(self, service, mock_db, make_result):
        """Test intervallo di un solo giorno ammesso."""
        mock_db.execute.return_value = make_result(one=(Decimal("10"), Decimal("0")))

        summary = await service.client_summary(mock_db, 1, START, START)

        assert summary.status == BalanceStatus.DEBT

    @pytest.mark.asyncio
    async def test_inverted_range(self, service, mock_db):
        """Test start_date > end_date rifiutato."""
        with pytest.raises(BusinessValidationError):
            await service.client_summary(mock_db, 1, END, START)
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_query_uses_stored_prices(self, service, mock_db, make_result, compile_pg):
        """Test la somma usa quantity * unit_price registrato sui movimenti attivi."""
        mock_db.execute.return_value = make_result(one=(0, 0))

        await service.client_summary(mock_db, 1, START, END)

        assert mock_db.execute.await_count == 1
        sql = compile_pg(mock_db.execute.call_args.args[0])
        assert "sum(consumption_entries.quantity * consumption_entries.unit_price)" in sql
        assert "sum(client_payments.amount)" in sql
        assert "consumption_entries.is_active" in sql
        assert "consumption_entries.entry_date >=" in sql
        assert "consumption_entries.entry_date <=" in sql


# ============================================================
# Tests for reports
# ============================================================


class TestReports:
    """Tests for consumption and payments reports."""

    @pytest.mark.asyncio
    async def test_daily_report(self, service, mock_db, make_result, mock_entry):
        """Test report giornaliero: una riga per movimento."""
        mock_db.execute.return_value = make_result(rows=[(mock_entry, "SABLE 0/3", "T")])

        report = await service.client_consumption_report(mock_db, 1, START, END)

        assert report.group_by == ReportGroupBy.DAILY
        assert len(report.rows) == 1
        assert report.rows[0].sequence_number == "001/2025"
        assert report.total_amount == Decimal("12000.00")

    @pytest.mark.asyncio
    async def test_monthly_report(self, service, mock_db, make_result, compile_pg):
        """Test report mensile aggregato per mese, prodotto e prezzo."""
        mock_db.execute.return_value = make_result(
            rows=[
                (date(2025, 1, 1), 1, "SABLE 0/3", "T", Decimal("10.000"), Decimal("1200.00"), Decimal("12000.00000")),
                (date(2025, 1, 1), 2, "GRAVIER 8/15", "T", Decimal("2.500"), Decimal("900.00"), Decimal("2250.00000")),
            ]
        )

        report = await service.client_consumption_report(
            mock_db, 1, START, END, group_by=ReportGroupBy.MONTHLY
        )

        assert [row.total_amount for row in report.rows] == [Decimal("12000.00"), Decimal("2250.00")]
        assert report.total_amount == Decimal("14250.00")
        sql = compile_pg(mock_db.execute.call_args.args[0])
        assert "date_trunc" in sql
        assert "GROUP BY" in sql

    @pytest.mark.asyncio
    async def test_payments_report(self, service, mock_db, make_result, mock_payment):
        """Test report pagamenti con nome del tipo."""
        mock_db.execute.return_value = make_result(rows=[(mock_payment, "check")])

        rows = await service.payments_report(mock_db, 1, START, END)

        assert rows[0].payment_type == "check"
        assert rows[0].amount == Decimal("100.00")
        assert rows[0].original_amount == Decimal("119.00")
