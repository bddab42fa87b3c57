"""
Numeri Progressivi Annuali
Progetto: Materials Ledger (Gestionale Forniture)

Genera i numeri progressivi dei movimenti nel formato NNN/YYYY.

Il contatore è una riga per anno nella tabella sequence_counters,
incrementata con un solo statement INSERT ... ON CONFLICT DO UPDATE
... RETURNING: due transazioni concorrenti non possono ottenere lo
stesso valore, perché la seconda attende il lock di riga della prima.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BusinessValidationError
from app.models import SequenceCounter

# Logger per questo modulo
logger = logging.getLogger(__name__)


def format_sequence(value: int, year: int, min_digits: Optional[int] = None) -> str:
    """
    Formatta un progressivo: format_sequence(7, 2024) → "007/2024".

    Oltre 999 il numero cresce senza troncamento ("1000/2024").
    """
    if value < 1:
        raise BusinessValidationError(f"Progressivo non valido: {value}")
    digits = min_digits if min_digits is not None else settings.sequence_min_digits
    return f"{value:0{digits}d}/{year}"


class SequenceService:
    """Service per i contatori annuali dei movimenti."""

    @staticmethod
    def _check_year(year: int) -> None:
        if year < 1:
            raise BusinessValidationError(f"Anno non valido: {year}")

    async def next_sequence(self, db: AsyncSession, year: int) -> str:
        """
        Assegna il prossimo progressivo dell'anno.

        Il primo valore di un anno nuovo è 1. Il valore consumato fa parte
        della transazione corrente: in caso di rollback non viene sprecato.

        Returns:
            Il progressivo formattato (es. "012/2024")
        """
        self._check_year(year)

        stmt = (
            pg_insert(SequenceCounter)
            .values(year=year, last_value=1)
            .on_conflict_do_update(
                index_elements=[SequenceCounter.year],
                set_={
                    "last_value": SequenceCounter.last_value + 1,
                    "updated_at": func.now(),
                },
            )
            .returning(SequenceCounter.last_value)
        )
        result = await db.execute(stmt)
        value = result.scalar_one()

        sequence = format_sequence(value, year)
        logger.info("Assegnato progressivo %s", sequence)
        return sequence

    async def peek_sequence(self, db: AsyncSession, year: int) -> str:
        """
        Anteprima del prossimo progressivo, senza consumarlo.

        Il valore mostrato può essere assegnato ad altri prima della
        registrazione effettiva.
        """
        self._check_year(year)

        result = await db.execute(
            select(SequenceCounter.last_value).where(SequenceCounter.year == year)
        )
        last_value = result.scalar_one_or_none() or 0
        return format_sequence(last_value + 1, year)


sequence_service = SequenceService()
