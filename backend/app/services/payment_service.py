"""
Service Layer per i Pagamenti
Progetto: Materials Ledger (Gestionale Forniture)

Registra i pagamenti dei clienti normalizzando l'importo in base al
tipo di pagamento: per i tipi al netto d'imposta (default: assegni)
l'importo registrato è original / tax_divisor, arrotondato al centesimo.
L'importo originale viene sempre conservato.
"""

import datetime
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BusinessValidationError, ConflictError
from app.models import Client, ClientPayment, PaymentType
from app.schemas.payment import PaymentCreate

# Logger per questo modulo
logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class PaymentService:
    """Service per la registrazione e consultazione dei pagamenti."""

    def __init__(
        self,
        tax_exclusive_types: Optional[Iterable[str]] = None,
        tax_divisor: Optional[Decimal] = None,
    ) -> None:
        types = tax_exclusive_types if tax_exclusive_types is not None else settings.tax_exclusive_payment_types
        self.tax_exclusive_types = frozenset(t.strip().lower() for t in types)
        self.tax_divisor = tax_divisor if tax_divisor is not None else settings.tax_divisor

    def normalize_amount(self, original: Decimal, payment_type_name: str) -> Decimal:
        """
        Calcola l'importo da registrare nei saldi.

        Esempi (divisore 1.19):
            normalize_amount(Decimal("119.00"), "check") → Decimal("100.00")
            normalize_amount(Decimal("50"), "cash")      → Decimal("50.00")

        Raises:
            BusinessValidationError: Se l'importo non è positivo
        """
        if original is None or original <= 0:
            raise BusinessValidationError("L'importo del pagamento deve essere maggiore di zero")

        if (payment_type_name or "").strip().lower() in self.tax_exclusive_types:
            amount = original / self.tax_divisor
        else:
            amount = original
        return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)

    async def list_payment_types(self, db: AsyncSession) -> list[PaymentType]:
        result = await db.execute(select(PaymentType).order_by(PaymentType.id.asc()))
        return list(result.scalars().all())

    async def list_by_client(
        self,
        db: AsyncSession,
        client_id: int,
        start_date: Optional[datetime.date] = None,
        end_date: Optional[datetime.date] = None,
    ) -> list[ClientPayment]:
        """Pagamenti di un cliente, dal più recente."""
        query = select(ClientPayment).where(ClientPayment.client_id == client_id)
        if start_date is not None:
            query = query.where(ClientPayment.payment_date >= start_date)
        if end_date is not None:
            query = query.where(ClientPayment.payment_date <= end_date)
        query = query.order_by(ClientPayment.payment_date.desc(), ClientPayment.id.desc())

        result = await db.execute(query)
        return list(result.scalars().all())

    async def record(self, db: AsyncSession, data: PaymentCreate) -> ClientPayment:
        """
        Registra un pagamento.

        Raises:
            BusinessValidationError: Importo non positivo, cliente o tipo
                di pagamento inesistente
            ConflictError: Errore imprevisto del database
        """
        if data.original_amount is None or data.original_amount <= 0:
            raise BusinessValidationError("L'importo del pagamento deve essere maggiore di zero")

        result = await db.execute(
            select(Client.id).where(Client.id == data.client_id, Client.is_active == True)
        )
        if result.scalar_one_or_none() is None:
            logger.warning("Pagamento per cliente inesistente: %s", data.client_id)
            raise BusinessValidationError(f"Cliente {data.client_id} inesistente o disattivato")

        result = await db.execute(
            select(PaymentType).where(PaymentType.id == data.payment_type_id)
        )
        payment_type = result.scalar_one_or_none()
        if payment_type is None:
            logger.warning("Tipo di pagamento inesistente: %s", data.payment_type_id)
            raise BusinessValidationError(f"Tipo di pagamento {data.payment_type_id} inesistente")

        original_amount = data.original_amount.quantize(CENT, rounding=ROUND_HALF_UP)
        amount = self.normalize_amount(original_amount, payment_type.name)

        payment = ClientPayment(
            client_id=data.client_id,
            payment_date=data.payment_date,
            amount=amount,
            original_amount=original_amount,
            payment_type_id=payment_type.id,
            currency=data.currency or settings.default_currency,
            notes=data.notes,
        )

        try:
            db.add(payment)
            await db.flush()
            await db.refresh(payment)

            logger.info(
                "Registrato pagamento %s cliente=%s tipo=%s originale=%s registrato=%s",
                payment.id, payment.client_id, payment_type.name,
                payment.original_amount, payment.amount,
            )
            return payment

        except IntegrityError as e:
            logger.error("Errore IntegrityError registrazione pagamento: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            if "foreign key" in str(e.orig).lower():
                raise BusinessValidationError("Cliente o tipo di pagamento inesistente")
            raise ConflictError("Errore durante la registrazione del pagamento")

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy registrazione pagamento: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError("Errore del database durante la registrazione del pagamento")
