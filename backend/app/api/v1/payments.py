"""
Router FastAPI per i Pagamenti
Progetto: Materials Ledger (Gestionale Forniture)
"""

import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.payment import PaymentCreate, PaymentRead, PaymentTypeRead
from app.services.payment_service import PaymentService

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/payments",
    tags=["Pagamenti"],
)


def get_payment_service() -> PaymentService:
    """Dependency per ottenere un'istanza del PaymentService."""
    return PaymentService()


@router.get(
    "/types",
    name="tipi_pagamento",
    summary="Tipi di pagamento",
    response_model=list[PaymentTypeRead],
)
async def list_payment_types(
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> list[PaymentTypeRead]:
    payment_types = await service.list_payment_types(db)
    return [PaymentTypeRead.model_validate(t) for t in payment_types]


@router.post(
    "/",
    name="pagamento_registra",
    summary="Registra pagamento",
    description="Registra un pagamento; l'importo nei saldi dipende dal tipo di pagamento.",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    data: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentRead:
    payment = await service.record(db, data)
    await db.commit()
    return PaymentRead.model_validate(payment)


@router.get(
    "/client/{client_id}",
    name="pagamenti_cliente",
    summary="Pagamenti di un cliente",
    response_model=list[PaymentRead],
)
async def list_client_payments(
    client_id: int,
    start_date: Optional[datetime.date] = Query(None, description="Data iniziale (inclusa)"),
    end_date: Optional[datetime.date] = Query(None, description="Data finale (inclusa)"),
    db: AsyncSession = Depends(get_db),
    service: PaymentService = Depends(get_payment_service),
) -> list[PaymentRead]:
    payments = await service.list_by_client(db, client_id, start_date=start_date, end_date=end_date)
    return [PaymentRead.model_validate(p) for p in payments]
