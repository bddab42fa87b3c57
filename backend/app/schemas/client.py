"""
Schemas Pydantic per l'entità Client
Progetto: Materials Ledger (Gestionale Forniture)
"""
# Definisce gli schemi di validazione e serializzazione per l'API.

import datetime
import logging
import re
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)


# Caratteri ammessi nei codici cliente/prodotto
_CODE_DISALLOWED = re.compile(r"[^a-zA-Z0-9\-_]")


# -------------------------------------------------------------------
# Funzioni di normalizzazione
# -------------------------------------------------------------------

def sanitize_code(code: Optional[str]) -> Optional[str]:
    """
    Rimuove dal codice tutto ciò che non è lettera, cifra, '-' o '_'.

    Esempio: "0/31.5" → "0315"

    Raises:
        ValueError: Se dopo la sanitizzazione il codice è vuoto
    """
    if code is None:
        return None
    sanitized = _CODE_DISALLOWED.sub("", code.strip())
    if not sanitized:
        raise ValueError("Il codice deve contenere almeno una lettera o cifra")
    if sanitized != code:
        logger.debug("Codice sanitizzato: %r → %r", code, sanitized)
    return sanitized


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalizza il numero di telefono: rimuove spazi, accetta + e cifre.

    Raises:
        ValueError: Se il formato non è valido
    """
    if phone is None:
        return None
    normalized = phone.strip().replace(" ", "")
    if not normalized:
        return None
    if not re.match(r"^\+?\d+$", normalized):
        raise ValueError("Numero di telefono non valido")
    return normalized


def _empty_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# -------------------------------------------------------------------
# Schemas
# -------------------------------------------------------------------

class ClientBase(BaseModel):
    """Campi comuni a creazione e lettura cliente."""

    name: str = Field(..., min_length=1, max_length=255, description="Nome o ragione sociale")
    code: str = Field(..., min_length=1, max_length=50, description="Codice cliente univoco")
    address: Optional[str] = Field(None, description="Indirizzo")
    phone: Optional[str] = Field(None, max_length=50, description="Telefono")
    email: Optional[EmailStr] = Field(None, description="Email")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("address", "email", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        return _empty_to_none(v)

    _sanitize_code = field_validator("code")(sanitize_code)
    _normalize_phone = field_validator("phone")(normalize_phone)


class ClientCreate(ClientBase):
    """
    Schema per la registrazione di un cliente.

    Se esiste un cliente disattivato con lo stesso codice o nome,
    la registrazione lo riattiva aggiornandone i dati.
    """
    pass


class ClientUpdate(BaseModel):
    """Aggiornamento parziale di un cliente: tutti i campi opzionali."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None

    @field_validator("address", "email", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        return _empty_to_none(v)

    _sanitize_code = field_validator("code")(sanitize_code)
    _normalize_phone = field_validator("phone")(normalize_phone)


class ClientRead(BaseModel):
    """Schema di lettura cliente."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime


class ClientList(BaseModel):
    """Lista clienti con totale."""

    items: list[ClientRead]
    total: int
