"""
Modello SQLAlchemy per l'entità Product
Progetto: Materials Ledger (Gestionale Forniture)

Catalogo dei materiali forniti (sabbia, ghiaia, misto frantumato, ...).
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import IntegerIDMixin, SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from app.models.pricing import GeneralPrice


class Product(Base, IntegerIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    Modello per l'anagrafica prodotti.

    Nome e codice sono univoci anche tra i prodotti disattivati.
    Il campo price è il prezzo base inserito in anagrafica; il prezzo
    effettivamente applicato è risolto dal PriceResolver (la tabella
    general_prices viene tenuta allineata dal ProductService).

    Attributes:
        id: Primary key intera
        name: Nome prodotto univoco (es. "GRAVIER 3/8")
        code: Codice prodotto univoco (es. "3/8" sanitizzato in "38")
        unit: Unità di misura (default "T", tonnellate)
        price: Prezzo base opzionale
        is_active: Flag soft delete
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        doc="Nome prodotto univoco",
    )

    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        doc="Codice prodotto univoco",
    )

    unit: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="T",
        server_default="T",
        doc="Unità di misura",
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
        doc="Prezzo base di anagrafica",
    )

    general_price: Mapped[Optional["GeneralPrice"]] = relationship(
        "GeneralPrice",
        back_populates="product",
        uselist=False,
        lazy="noload",
        doc="Prezzo generale (fascia base) del prodotto",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_positive"),
    )

    def __repr__(self) -> str:
        return f"Product(id={self.id!r}, name={self.name!r}, code={self.code!r})"
