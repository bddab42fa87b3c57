"""
Saldi e Report Clienti
Progetto: Materials Ledger (Gestionale Forniture)

Contiene:
- Riepilogo contabile (consumi, pagamenti, saldo, Credit/Debt)
- Report consumi giornaliero o mensile
- Report pagamenti

I valori dei consumi usano sempre il prezzo registrato sul movimento,
mai una nuova risoluzione dai listini. Gli intervalli di date sono
inclusivi su entrambi gli estremi.
"""

import datetime
import logging
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import Date, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BusinessValidationError
from app.models import ClientPayment, ConsumptionEntry, PaymentType, Product
from app.schemas.payment import PaymentReportRow
from app.schemas.report import (
    BalanceStatus,
    ClientSummary,
    ConsumptionReport,
    ConsumptionReportRow,
    ReportGroupBy,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def _check_range(start_date: datetime.date, end_date: datetime.date) -> None:
    if start_date > end_date:
        raise BusinessValidationError(
            f"Intervallo non valido: {start_date} è successiva a {end_date}"
        )


class LedgerService:
    """Service di sola lettura per saldi e report."""

    async def client_summary(
        self,
        db: AsyncSession,
        client_id: int,
        start_date: datetime.date,
        end_date: datetime.date,
    ) -> ClientSummary:
        """
        Riepilogo contabile di un cliente.

        total_consumption_value = Σ quantity * unit_price dei movimenti attivi
        total_payments = Σ importi normalizzati
        balance = total_payments - total_consumption_value
        status = Credit se balance >= 0, altrimenti Debt

        Entrambe le somme sono lette con un'unica SELECT. Nessun movimento
        o pagamento nell'intervallo → saldo 0, Credit.

        Raises:
            BusinessValidationError: Se start_date > end_date
        """
        _check_range(start_date, end_date)

        consumption_total = (
            select(
                func.coalesce(
                    func.sum(ConsumptionEntry.quantity * ConsumptionEntry.unit_price), 0
                )
            )
            .where(
                ConsumptionEntry.client_id == client_id,
                ConsumptionEntry.is_active == True,
                ConsumptionEntry.entry_date >= start_date,
                ConsumptionEntry.entry_date <= end_date,
            )
            .scalar_subquery()
        )
        payments_total = (
            select(func.coalesce(func.sum(ClientPayment.amount), 0))
            .where(
                ClientPayment.client_id == client_id,
                ClientPayment.payment_date >= start_date,
                ClientPayment.payment_date <= end_date,
            )
            .scalar_subquery()
        )

        result = await db.execute(select(consumption_total, payments_total))
        consumption_value, payments_value = result.one()

        total_consumption_value = _money(consumption_value)
        total_payments = _money(payments_value)
        balance = total_payments - total_consumption_value
        status = BalanceStatus.CREDIT if balance >= 0 else BalanceStatus.DEBT

        logger.info(
            "Saldo cliente %s (%s - %s): consumi=%s pagamenti=%s saldo=%s %s",
            client_id, start_date, end_date,
            total_consumption_value, total_payments, balance, status.value,
        )
        return ClientSummary(
            client_id=client_id,
            start_date=start_date,
            end_date=end_date,
            total_consumption_value=total_consumption_value,
            total_payments=total_payments,
            balance=balance,
            status=status,
        )

    async def client_consumption_report(
        self,
        db: AsyncSession,
        client_id: int,
        start_date: datetime.date,
        end_date: datetime.date,
        group_by: ReportGroupBy = ReportGroupBy.DAILY,
    ) -> ConsumptionReport:
        """
        Report consumi di un cliente.

        daily: un movimento per riga, ordinati per data.
        monthly: righe aggregate per mese, prodotto e prezzo unitario.
        """
        _check_range(start_date, end_date)

        filters = (
            ConsumptionEntry.client_id == client_id,
            ConsumptionEntry.is_active == True,
            ConsumptionEntry.entry_date >= start_date,
            ConsumptionEntry.entry_date <= end_date,
        )

        rows: list[ConsumptionReportRow] = []
        if group_by == ReportGroupBy.MONTHLY:
            month = cast(func.date_trunc("month", ConsumptionEntry.entry_date), Date).label("month")
            query = (
                select(
                    month,
                    Product.id,
                    Product.name,
                    Product.unit,
                    func.sum(ConsumptionEntry.quantity).label("quantity"),
                    ConsumptionEntry.unit_price,
                    func.sum(ConsumptionEntry.quantity * ConsumptionEntry.unit_price).label("total"),
                )
                .select_from(ConsumptionEntry)
                .join(Product, Product.id == ConsumptionEntry.product_id)
                .where(*filters)
                .group_by(month, Product.id, Product.name, Product.unit, ConsumptionEntry.unit_price)
                .order_by(month.asc(), Product.name.asc())
            )
            result = await db.execute(query)
            for period, product_id, name, unit, quantity, unit_price, total in result.all():
                rows.append(
                    ConsumptionReportRow(
                        period=period,
                        product_id=product_id,
                        product_name=name,
                        unit=unit,
                        quantity=quantity,
                        unit_price=unit_price,
                        total_amount=_money(total),
                    )
                )
        else:
            query = (
                select(ConsumptionEntry, Product.name, Product.unit)
                .join(Product, Product.id == ConsumptionEntry.product_id)
                .where(*filters)
                .order_by(ConsumptionEntry.entry_date.asc(), ConsumptionEntry.id.asc())
            )
            result = await db.execute(query)
            for entry, name, unit in result.all():
                rows.append(
                    ConsumptionReportRow(
                        period=entry.entry_date,
                        product_id=entry.product_id,
                        product_name=name,
                        unit=unit,
                        quantity=entry.quantity,
                        unit_price=entry.unit_price,
                        total_amount=entry.total_amount,
                        sequence_number=entry.sequence_number,
                        notes=entry.notes,
                    )
                )

        return ConsumptionReport(
            client_id=client_id,
            start_date=start_date,
            end_date=end_date,
            group_by=group_by,
            rows=rows,
            total_amount=sum((row.total_amount for row in rows), Decimal("0.00")),
        )

    async def payments_report(
        self,
        db: AsyncSession,
        client_id: int,
        start_date: datetime.date,
        end_date: datetime.date,
    ) -> list[PaymentReportRow]:
        """Pagamenti di un cliente nell'intervallo, dal più recente."""
        _check_range(start_date, end_date)

        query = (
            select(ClientPayment, PaymentType.name)
            .join(PaymentType, PaymentType.id == ClientPayment.payment_type_id)
            .where(
                ClientPayment.client_id == client_id,
                ClientPayment.payment_date >= start_date,
                ClientPayment.payment_date <= end_date,
            )
            .order_by(ClientPayment.payment_date.desc(), ClientPayment.id.desc())
        )
        result = await db.execute(query)

        return [
            PaymentReportRow(
                id=payment.id,
                payment_date=payment.payment_date,
                amount=payment.amount,
                original_amount=payment.original_amount,
                payment_type=type_name,
                currency=payment.currency,
                notes=payment.notes,
            )
            for payment, type_name in result.all()
        ]
