"""
Service Layer per i Consumi
Progetto: Materials Ledger (Gestionale Forniture)

Registrazione dei movimenti di consumo:
- Validazione di quantità, cliente e prodotto
- Prezzo e totale fotografati al momento della scrittura
- Progressivo annuale assegnato automaticamente
- Riattivazione di un movimento disattivato con stessa data/cliente/prodotto
- Soft delete
"""

import datetime
import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    BusinessValidationError,
    ConflictError,
    DuplicateError,
    NotFoundError,
)
from app.models import Client, ConsumptionEntry, Product
from app.schemas.consumption import ConsumptionCreate, ConsumptionDayRow
from app.services.price_resolver import PriceResolver, price_resolver
from app.services.sequence_service import SequenceService, sequence_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

_NOTES_DISALLOWED = re.compile(r"[<>'\"&]")


def sanitize_notes(notes: Optional[str]) -> Optional[str]:
    """Rimuove i caratteri < > ' \" & dalle note. Note vuote → None."""
    if notes is None:
        return None
    cleaned = _NOTES_DISALLOWED.sub("", notes).strip()
    return cleaned or None


def compute_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    """Totale riga: quantity * unit_price arrotondato a 2 decimali (ROUND_HALF_UP)."""
    return (quantity * unit_price).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ConsumptionService:
    """
    Service per la registrazione dei consumi.

    Tutte le scritture avvengono nella transazione della sessione ricevuta:
    lookup prezzo, assegnazione progressivo e insert/riattivazione vengono
    confermati o annullati insieme dal chiamante.
    """

    def __init__(
        self,
        resolver: Optional[PriceResolver] = None,
        sequences: Optional[SequenceService] = None,
    ) -> None:
        self.resolver = resolver or price_resolver
        self.sequences = sequences or sequence_service

    # ------------------------------------------------------------
    # Letture
    # ------------------------------------------------------------

    async def get_by_id(
        self,
        db: AsyncSession,
        entry_id: int,
        include_inactive: bool = False,
    ) -> ConsumptionEntry:
        """
        Recupera un movimento per ID.

        Raises:
            NotFoundError: Se il movimento non esiste (o è disattivato)
        """
        query = select(ConsumptionEntry).where(ConsumptionEntry.id == entry_id)
        if not include_inactive:
            query = query.where(ConsumptionEntry.is_active == True)
        result = await db.execute(query)
        entry = result.scalar_one_or_none()

        if entry is None:
            logger.warning("Movimento non trovato: %s", entry_id)
            raise NotFoundError(f"Movimento con ID {entry_id} non trovato")
        return entry

    async def list_by_date(
        self,
        db: AsyncSession,
        entry_date: datetime.date,
    ) -> list[ConsumptionDayRow]:
        """Movimenti attivi di una giornata, con nomi cliente e prodotto."""
        query = (
            select(ConsumptionEntry, Client.name, Product.name, Product.unit)
            .join(Client, Client.id == ConsumptionEntry.client_id)
            .join(Product, Product.id == ConsumptionEntry.product_id)
            .where(
                ConsumptionEntry.entry_date == entry_date,
                ConsumptionEntry.is_active == True,
            )
            .order_by(ConsumptionEntry.id.asc())
        )
        result = await db.execute(query)

        rows = []
        for entry, client_name, product_name, unit in result.all():
            rows.append(
                ConsumptionDayRow(
                    id=entry.id,
                    entry_date=entry.entry_date,
                    client_id=entry.client_id,
                    client_name=client_name,
                    product_id=entry.product_id,
                    product_name=product_name,
                    unit=unit,
                    quantity=entry.quantity,
                    unit_price=entry.unit_price,
                    total_amount=entry.total_amount,
                    sequence_number=entry.sequence_number,
                    notes=entry.notes,
                )
            )
        return rows

    # ------------------------------------------------------------
    # Registrazione
    # ------------------------------------------------------------

    async def record(self, db: AsyncSession, data: ConsumptionCreate) -> ConsumptionEntry:
        """
        Registra un movimento di consumo.

        Se esiste un movimento disattivato con stessa data, cliente e
        prodotto, viene riattivato e sovrascritto (stesso ID) invece di
        inserirne uno nuovo. Senza progressivo esplicito la riga riattivata
        conserva il suo.

        Args:
            db: Sessione database
            data: Dati del movimento

        Returns:
            Il movimento creato o riattivato

        Raises:
            BusinessValidationError: Quantità non positiva, cliente o
                prodotto inesistente o disattivato
            DuplicateError: Progressivo esplicito già assegnato
            ConflictError: Errore imprevisto del database
        """
        if data.quantity is None or data.quantity <= 0:
            raise BusinessValidationError("La quantità deve essere maggiore di zero")

        quantity = data.quantity.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
        if quantity <= 0:
            raise BusinessValidationError("La quantità deve essere maggiore di zero")

        await self._require_active(db, Client, data.client_id, "Cliente")
        await self._require_active(db, Product, data.product_id, "Prodotto")

        # Riga disattivata da riattivare, bloccata fino a fine transazione
        inactive_query = (
            select(ConsumptionEntry)
            .where(
                ConsumptionEntry.entry_date == data.entry_date,
                ConsumptionEntry.client_id == data.client_id,
                ConsumptionEntry.product_id == data.product_id,
                ConsumptionEntry.is_active == False,
            )
            .order_by(ConsumptionEntry.id.asc())
            .limit(1)
            .with_for_update()
        )
        result = await db.execute(inactive_query)
        existing = result.scalar_one_or_none()

        if data.sequence_number:
            await self._check_sequence_free(
                db, data.sequence_number, exclude_id=existing.id if existing else None
            )

        if data.unit_price is not None and data.total_amount is not None:
            unit_price = data.unit_price
            total_amount = data.total_amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        else:
            if data.unit_price is not None:
                unit_price = data.unit_price
            else:
                unit_price = await self.resolver.resolve_price(
                    db, data.client_id, data.product_id, as_of=data.entry_date
                )
            total_amount = compute_total(quantity, unit_price)
        unit_price = unit_price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

        notes = sanitize_notes(data.notes)

        try:
            if existing is not None:
                sequence_number = data.sequence_number or existing.sequence_number
                if not sequence_number:
                    sequence_number = await self.sequences.next_sequence(
                        db, datetime.date.today().year
                    )
                existing.quantity = quantity
                existing.unit_price = unit_price
                existing.total_amount = total_amount
                existing.sequence_number = sequence_number
                existing.notes = notes
                existing.is_active = True
                await db.flush()
                await db.refresh(existing)

                logger.info(
                    "Riattivato movimento %s (%s) cliente=%s prodotto=%s qty=%s",
                    existing.id, existing.sequence_number,
                    existing.client_id, existing.product_id, existing.quantity,
                )
                return existing

            sequence_number = data.sequence_number or await self.sequences.next_sequence(
                db, datetime.date.today().year
            )
            entry = ConsumptionEntry(
                entry_date=data.entry_date,
                client_id=data.client_id,
                product_id=data.product_id,
                quantity=quantity,
                unit_price=unit_price,
                total_amount=total_amount,
                sequence_number=sequence_number,
                notes=notes,
            )
            db.add(entry)
            await db.flush()
            await db.refresh(entry)

            logger.info(
                "Registrato movimento %s (%s) cliente=%s prodotto=%s qty=%s totale=%s",
                entry.id, entry.sequence_number,
                entry.client_id, entry.product_id, entry.quantity, entry.total_amount,
            )
            return entry

        except IntegrityError as e:
            logger.error("Errore IntegrityError registrazione movimento: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            err_str = str(e.orig).lower()
            if "sequence_number" in err_str:
                raise DuplicateError(f"Progressivo '{data.sequence_number}' già assegnato")
            if "foreign key" in err_str:
                raise BusinessValidationError("Cliente o prodotto inesistente")
            raise ConflictError("Errore durante la registrazione del movimento")

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy registrazione movimento: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError("Errore del database durante la registrazione del movimento")

    async def delete(self, db: AsyncSession, entry_id: int) -> None:
        """
        Disattiva un movimento (soft delete).

        Raises:
            NotFoundError: Se non esiste un movimento attivo con questo ID
        """
        entry = await self.get_by_id(db, entry_id)

        try:
            entry.is_active = False
            await db.flush()
            logger.info("Soft delete movimento: %s (%s)", entry.id, entry.sequence_number)

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy eliminazione movimento: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError("Errore del database durante l'eliminazione del movimento")

    # ----------------------------------------------------------------
    # Metodi privati di supporto
    # ----------------------------------------------------------------

    async def _require_active(self, db: AsyncSession, model, object_id: int, label: str) -> None:
        result = await db.execute(
            select(model.id).where(model.id == object_id, model.is_active == True)
        )
        if result.scalar_one_or_none() is None:
            logger.warning("%s %s inesistente o disattivato", label, object_id)
            raise BusinessValidationError(f"{label} {object_id} inesistente o disattivato")

    async def _check_sequence_free(
        self,
        db: AsyncSession,
        sequence_number: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        query = select(ConsumptionEntry.id).where(
            ConsumptionEntry.sequence_number == sequence_number
        )
        if exclude_id is not None:
            query = query.where(ConsumptionEntry.id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one_or_none() is not None:
            logger.warning("Progressivo già assegnato: %s", sequence_number)
            raise DuplicateError(f"Progressivo '{sequence_number}' già assegnato")
