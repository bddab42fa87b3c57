"""
Schemas Pydantic per l'entità Product
Progetto: Materials Ledger (Gestionale Forniture)
"""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.client import sanitize_code


class ProductCreate(BaseModel):
    """
    Schema per la creazione di un prodotto.

    general_price, se positivo, viene registrato anche come prezzo
    generale del prodotto (tabella general_prices).
    """

    name: str = Field(..., min_length=1, max_length=100, description="Nome prodotto univoco")
    code: str = Field(..., min_length=1, max_length=50, description="Codice prodotto univoco")
    unit: Optional[str] = Field(None, max_length=20, description="Unità di misura (default da configurazione)")
    general_price: Optional[Decimal] = Field(None, ge=0, description="Prezzo generale")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("unit", mode="before")
    @classmethod
    def blank_unit_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    _sanitize_code = field_validator("code")(sanitize_code)


class ProductUpdate(BaseModel):
    """
    Aggiornamento parziale di un prodotto.

    general_price = 0 rimuove il prezzo generale, > 0 lo imposta,
    assente lo lascia invariato.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    unit: Optional[str] = Field(None, max_length=20)
    general_price: Optional[Decimal] = Field(None, ge=0)

    _sanitize_code = field_validator("code")(sanitize_code)


class ProductRead(BaseModel):
    """Schema di lettura prodotto."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    unit: str
    price: Decimal
    is_active: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime
