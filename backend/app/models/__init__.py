"""
Modelli Database SQLAlchemy
Progetto: Materials Ledger (Gestionale Forniture)

Import centralizzato di tutti i modelli.

Modelli:
- Client: Anagrafica clienti
- Product: Catalogo prodotti
- PriceCategory, CategoryPrice, ClientPriceAssignment, GeneralPrice, ClientPrice: Listini
- ConsumptionEntry: Movimenti di consumo
- SequenceCounter: Contatori progressivi annuali
- PaymentType, ClientPayment: Pagamenti
"""

# SQLAlchemy 2.0 Base declarativa
# Importato qui per essere disponibile per tutti i modelli
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class per tutti i modelli SQLAlchemy."""
    pass


from app.models.client import Client
from app.models.product import Product
from app.models.pricing import (
    GENERAL_CATEGORY_NAME,
    CategoryPrice,
    ClientPrice,
    ClientPriceAssignment,
    GeneralPrice,
    PriceCategory,
)
from app.models.consumption import ConsumptionEntry, SequenceCounter
from app.models.payment import ClientPayment, PaymentType

__all__ = [
    "Base",
    "Client",
    "Product",
    "GENERAL_CATEGORY_NAME",
    "PriceCategory",
    "CategoryPrice",
    "ClientPriceAssignment",
    "GeneralPrice",
    "ClientPrice",
    "ConsumptionEntry",
    "SequenceCounter",
    "PaymentType",
    "ClientPayment",
]
