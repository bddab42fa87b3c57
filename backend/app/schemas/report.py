"""
Schemas Pydantic per Saldi e Report
Progetto: Materials Ledger (Gestionale Forniture)
"""

import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BalanceStatus(str, Enum):
    """Credit: pagamenti >= consumi. Debt: il cliente deve ancora pagare."""

    CREDIT = "Credit"
    DEBT = "Debt"


class ReportGroupBy(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"


class ClientSummary(BaseModel):
    """
    Riepilogo contabile di un cliente in un intervallo di date (estremi inclusi).

    balance = total_payments - total_consumption_value
    """

    client_id: int
    start_date: datetime.date
    end_date: datetime.date
    total_consumption_value: Decimal = Field(..., description="Valore consumi attivi")
    total_payments: Decimal = Field(..., description="Somma pagamenti normalizzati")
    balance: Decimal
    status: BalanceStatus


class ConsumptionReportRow(BaseModel):
    """
    Riga del report consumi.

    Nel raggruppamento giornaliero period è la data del movimento,
    nel mensile il primo giorno del mese.
    """

    period: datetime.date
    product_id: int
    product_name: str
    unit: str
    quantity: Decimal
    unit_price: Decimal
    total_amount: Decimal
    sequence_number: Optional[str] = None
    notes: Optional[str] = None


class ConsumptionReport(BaseModel):
    client_id: int
    start_date: datetime.date
    end_date: datetime.date
    group_by: ReportGroupBy
    rows: list[ConsumptionReportRow]
    total_amount: Decimal
