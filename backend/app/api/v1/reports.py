"""
Router FastAPI per Saldi e Report
Progetto: Materials Ledger (Gestionale Forniture)
"""

import datetime
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.payment import PaymentReportRow
from app.schemas.report import ClientSummary, ConsumptionReport, ReportGroupBy
from app.services.ledger_service import LedgerService

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["Report"],
)


def get_ledger_service() -> LedgerService:
    """Dependency per ottenere un'istanza del LedgerService."""
    return LedgerService()


@router.get(
    "/clients/{client_id}/summary",
    name="saldo_cliente",
    summary="Saldo cliente",
    description="Consumi, pagamenti, saldo e stato Credit/Debt nell'intervallo (estremi inclusi).",
    response_model=ClientSummary,
)
async def client_summary(
    client_id: int,
    start_date: datetime.date = Query(..., description="Data iniziale (inclusa)"),
    end_date: datetime.date = Query(..., description="Data finale (inclusa)"),
    db: AsyncSession = Depends(get_db),
    service: LedgerService = Depends(get_ledger_service),
) -> ClientSummary:
    return await service.client_summary(db, client_id, start_date, end_date)


@router.get(
    "/clients/{client_id}/consumption",
    name="report_consumi_cliente",
    summary="Report consumi cliente",
    response_model=ConsumptionReport,
)
async def client_consumption_report(
    client_id: int,
    start_date: datetime.date = Query(..., description="Data iniziale (inclusa)"),
    end_date: datetime.date = Query(..., description="Data finale (inclusa)"),
    group_by: ReportGroupBy = Query(ReportGroupBy.DAILY, description="daily | monthly"),
    db: AsyncSession = Depends(get_db),
    service: LedgerService = Depends(get_ledger_service),
) -> ConsumptionReport:
    return await service.client_consumption_report(
        db, client_id, start_date, end_date, group_by=group_by
    )


@router.get(
    "/clients/{client_id}/payments",
    name="report_pagamenti_cliente",
    summary="Report pagamenti cliente",
    response_model=list[PaymentReportRow],
)
async def payments_report(
    client_id: int,
    start_date: datetime.date = Query(..., description="Data iniziale (inclusa)"),
    end_date: datetime.date = Query(..., description="Data finale (inclusa)"),
    db: AsyncSession = Depends(get_db),
    service: LedgerService = Depends(get_ledger_service),
) -> list[PaymentReportRow]:
    return await service.payments_report(db, client_id, start_date, end_date)
