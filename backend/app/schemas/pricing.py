"""
Schemas Pydantic per i Listini Prezzi
Progetto: Materials Ledger (Gestionale Forniture)

Contiene:
- PriceSource / ResolvedPrice: esito della risoluzione prezzo
- Schemi per fasce di prezzo, prezzi di fascia, assegnazioni,
  prezzi generali e prezzi personalizzati cliente
"""

import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def quantize_price(value: Optional[Decimal]) -> Optional[Decimal]:
    """Arrotonda un prezzo a 2 decimali (ROUND_HALF_UP)."""
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


# ------------------------------------------------------------
# Risoluzione prezzo
# ------------------------------------------------------------

class PriceSource(str, Enum):
    """Livello del listino da cui proviene il prezzo risolto."""

    CLIENT_OVERRIDE = "client_override"
    CATEGORY_TIER = "category_tier"
    GENERAL_DEFAULT = "general_default"
    NONE = "none"


class ResolvedPrice(BaseModel):
    """Prezzo unitario risolto per una coppia cliente/prodotto."""

    model_config = ConfigDict(frozen=True)

    price: Decimal = Field(..., ge=0)
    source: PriceSource


class ResolvedPriceRead(ResolvedPrice):
    """Risposta API della risoluzione prezzo."""

    client_id: int
    product_id: int
    as_of: Optional[datetime.date] = None


# ------------------------------------------------------------
# Fasce di prezzo
# ------------------------------------------------------------

class PriceCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Nome fascia")
    description: Optional[str] = Field(None, description="Descrizione")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class PriceCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class PriceCategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime.datetime


# ------------------------------------------------------------
# Prezzi di fascia
# ------------------------------------------------------------

class CategoryPriceUpsert(BaseModel):
    """Imposta (o sostituisce) il prezzo di un prodotto in una fascia."""

    category_id: int
    product_id: int
    price: Decimal = Field(..., ge=0)

    _quantize = field_validator("price")(quantize_price)


class CategoryPriceUpdate(BaseModel):
    price: Decimal = Field(..., ge=0)

    _quantize = field_validator("price")(quantize_price)


class CategoryPriceBulkItem(BaseModel):
    product_id: int
    price: Decimal = Field(..., ge=0)

    _quantize = field_validator("price")(quantize_price)


class CategoryPriceBulkUpdate(BaseModel):
    """
    Aggiornamento massivo dei prezzi di una fascia.

    I product_id che non corrispondono a prodotti esistenti vengono ignorati.
    """

    category_id: int
    prices: list[CategoryPriceBulkItem] = Field(..., min_length=1)


class CategoryPriceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_id: int
    product_id: int
    price: Decimal


class CategoryProductPrice(BaseModel):
    """Riga del listino di fascia: ogni prodotto attivo, prezzo 0 se assente."""

    product_id: int
    product_name: str
    product_code: str
    unit: str
    price: Decimal
    category_price_id: Optional[int] = None


class BulkUpdateResult(BaseModel):
    category_id: int
    updated: int
    skipped_product_ids: list[int] = Field(default_factory=list)


# ------------------------------------------------------------
# Assegnazione fascia al cliente
# ------------------------------------------------------------

class ClientPriceAssignmentUpsert(BaseModel):
    client_id: int
    category_id: int


class ClientPriceAssignmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    client_id: int
    category_id: int
    category_name: Optional[str] = None


# ------------------------------------------------------------
# Prezzi generali
# ------------------------------------------------------------

class GeneralPriceUpsert(BaseModel):
    product_id: int
    price: Decimal = Field(..., ge=0)

    _quantize = field_validator("price")(quantize_price)


class GeneralPriceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    price: Decimal
    product_name: Optional[str] = None
    product_code: Optional[str] = None


# ------------------------------------------------------------
# Prezzi personalizzati cliente
# ------------------------------------------------------------

class ClientPriceUpsert(BaseModel):
    """
    Prezzo personalizzato cliente/prodotto.

    valid_from/valid_to opzionali: intervallo [valid_from, valid_to).
    """

    client_id: int
    product_id: int
    price: Decimal = Field(..., ge=0)
    valid_from: Optional[datetime.date] = None
    valid_to: Optional[datetime.date] = None

    _quantize = field_validator("price")(quantize_price)

    @model_validator(mode="after")
    def check_interval(self) -> "ClientPriceUpsert":
        if self.valid_from and self.valid_to and self.valid_to <= self.valid_from:
            raise ValueError("valid_to deve essere successiva a valid_from")
        return self


class ClientPriceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    product_id: int
    price: Decimal
    valid_from: Optional[datetime.date] = None
    valid_to: Optional[datetime.date] = None
    product_name: Optional[str] = None
