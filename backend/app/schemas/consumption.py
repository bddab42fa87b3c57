"""
Schemas Pydantic per i Consumi
Progetto: Materials Ledger (Gestionale Forniture)
"""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConsumptionCreate(BaseModel):
    """
    Schema per la registrazione di un consumo.

    unit_price e total_amount sono opzionali: se uno dei due manca il
    prezzo viene risolto dai listini e il totale ricalcolato.
    sequence_number, se assente, viene generato dal contatore annuale.
    """

    entry_date: datetime.date = Field(..., description="Data del movimento")
    client_id: int = Field(..., description="ID cliente")
    product_id: int = Field(..., description="ID prodotto")
    quantity: Decimal = Field(..., description="Quantità (deve essere > 0)")
    unit_price: Optional[Decimal] = Field(None, ge=0, description="Prezzo unitario esplicito")
    total_amount: Optional[Decimal] = Field(None, ge=0, description="Importo totale esplicito")
    sequence_number: Optional[str] = Field(None, max_length=20, description="Progressivo NNN/YYYY")
    notes: Optional[str] = Field(None, description="Note")


class ConsumptionRead(BaseModel):
    """Schema di lettura di un movimento di consumo."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_date: datetime.date
    client_id: int
    product_id: int
    quantity: Decimal
    unit_price: Decimal
    total_amount: Decimal
    sequence_number: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime.datetime


class ConsumptionDayRow(BaseModel):
    """Movimento della giornata con i nomi di cliente e prodotto."""

    id: int
    entry_date: datetime.date
    client_id: int
    client_name: str
    product_id: int
    product_name: str
    unit: str
    quantity: Decimal
    unit_price: Decimal
    total_amount: Decimal
    sequence_number: Optional[str] = None
    notes: Optional[str] = None


class SequenceNumberRead(BaseModel):
    sequence_number: str
    year: int
