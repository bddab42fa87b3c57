"""
Router FastAPI per i Consumi
Progetto: Materials Ledger (Gestionale Forniture)

NOTE: /sequence/next e /date/{entry_date} sono dichiarate prima di /{entry_id}.
"""

import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.consumption import (
    ConsumptionCreate,
    ConsumptionDayRow,
    ConsumptionRead,
    SequenceNumberRead,
)
from app.services.consumption_service import ConsumptionService
from app.services.sequence_service import SequenceService

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/consumption",
    tags=["Consumi"],
)


def get_consumption_service() -> ConsumptionService:
    """Dependency per ottenere un'istanza del ConsumptionService."""
    return ConsumptionService()


def get_sequence_service() -> SequenceService:
    """Dependency per ottenere un'istanza del SequenceService."""
    return SequenceService()


@router.get(
    "/sequence/next",
    name="progressivo_anteprima",
    summary="Anteprima prossimo progressivo",
    description="Mostra il prossimo numero progressivo dell'anno senza consumarlo.",
    response_model=SequenceNumberRead,
)
async def peek_next_sequence(
    year: Optional[int] = Query(None, ge=1, description="Anno (default: anno corrente)"),
    db: AsyncSession = Depends(get_db),
    service: SequenceService = Depends(get_sequence_service),
) -> SequenceNumberRead:
    year = year or datetime.date.today().year
    sequence_number = await service.peek_sequence(db, year)
    return SequenceNumberRead(sequence_number=sequence_number, year=year)


@router.get(
    "/date/{entry_date}",
    name="consumi_giornata",
    summary="Consumi di una giornata",
    description="Movimenti attivi della data indicata con nomi cliente e prodotto.",
    response_model=list[ConsumptionDayRow],
)
async def list_by_date(
    entry_date: datetime.date,
    db: AsyncSession = Depends(get_db),
    service: ConsumptionService = Depends(get_consumption_service),
) -> list[ConsumptionDayRow]:
    return await service.list_by_date(db, entry_date)


@router.post(
    "/",
    name="consumo_registra",
    summary="Registra consumo",
    description=(
        "Registra un movimento. Prezzo e totale, se assenti, sono calcolati dai listini; "
        "il progressivo, se assente, viene assegnato automaticamente."
    ),
    response_model=ConsumptionRead,
    status_code=status.HTTP_201_CREATED,
)
async def record_consumption(
    data: ConsumptionCreate,
    db: AsyncSession = Depends(get_db),
    service: ConsumptionService = Depends(get_consumption_service),
) -> ConsumptionRead:
    entry = await service.record(db, data)
    await db.commit()
    return ConsumptionRead.model_validate(entry)


@router.get(
    "/{entry_id}",
    name="consumo_dettaglio",
    summary="Dettaglio movimento",
    response_model=ConsumptionRead,
)
async def get_consumption(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    service: ConsumptionService = Depends(get_consumption_service),
) -> ConsumptionRead:
    entry = await service.get_by_id(db, entry_id)
    return ConsumptionRead.model_validate(entry)


@router.delete(
    "/{entry_id}",
    name="consumo_elimina",
    summary="Elimina movimento",
    description="Disattiva un movimento (soft delete).",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_consumption(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    service: ConsumptionService = Depends(get_consumption_service),
) -> None:
    await service.delete(db, entry_id)
    await db.commit()
