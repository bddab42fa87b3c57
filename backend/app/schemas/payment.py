"""
Schemas Pydantic per i Pagamenti
Progetto: Materials Ledger (Gestionale Forniture)
"""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PaymentTypeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class PaymentCreate(BaseModel):
    """
    Schema per la registrazione di un pagamento.

    original_amount è l'importo inserito; l'importo registrato nei saldi
    viene calcolato in base al tipo di pagamento.
    """

    client_id: int = Field(..., description="ID cliente")
    payment_date: datetime.date = Field(..., description="Data del pagamento")
    original_amount: Decimal = Field(..., description="Importo inserito (deve essere > 0)")
    payment_type_id: int = Field(..., description="ID tipo di pagamento")
    currency: Optional[str] = Field(None, max_length=3, description="Valuta (default da configurazione)")
    notes: Optional[str] = Field(None, description="Note")

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v


class PaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    payment_date: datetime.date
    amount: Decimal
    original_amount: Decimal
    payment_type_id: int
    currency: str
    notes: Optional[str] = None
    created_at: datetime.datetime


class PaymentReportRow(BaseModel):
    """Riga del report pagamenti con il nome del tipo."""

    id: int
    payment_date: datetime.date
    amount: Decimal
    original_amount: Decimal
    payment_type: str
    currency: str
    notes: Optional[str] = None
