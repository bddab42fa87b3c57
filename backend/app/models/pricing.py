"""
Modelli SQLAlchemy per i Listini Prezzi
Progetto: Materials Ledger (Gestionale Forniture)

Contiene:
- PriceCategory: Fasce di prezzo (General, VIP, Scontato, ...)
- CategoryPrice: Prezzo di un prodotto in una fascia
- ClientPriceAssignment: Fascia assegnata a un cliente
- GeneralPrice: Prezzo generale di un prodotto (fallback)
- ClientPrice: Prezzo personalizzato cliente/prodotto (massima precedenza)

Ogni tabella ha un vincolo unique sulla propria chiave di business,
usato dagli upsert ON CONFLICT del PricingService.
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import CreatedAtMixin, IntegerIDMixin, TimestampMixin

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.product import Product


# Nome convenzionale della fascia base, primo record creato
GENERAL_CATEGORY_NAME = "General"


class PriceCategory(Base, IntegerIDMixin, CreatedAtMixin):
    """Fascia di prezzo assegnabile ai clienti."""

    __tablename__ = "price_categories"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        doc="Nome fascia univoco",
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    prices: Mapped[List["CategoryPrice"]] = relationship(
        "CategoryPrice",
        back_populates="category",
        cascade="all, delete-orphan",
        lazy="noload",
    )

    @property
    def is_general(self) -> bool:
        return self.name == GENERAL_CATEGORY_NAME

    def __repr__(self) -> str:
        return f"PriceCategory(id={self.id!r}, name={self.name!r})"


class CategoryPrice(Base, IntegerIDMixin, TimestampMixin):
    """Prezzo di un prodotto all'interno di una fascia."""

    __tablename__ = "category_prices"

    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("price_categories.id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    category: Mapped["PriceCategory"] = relationship(
        "PriceCategory", back_populates="prices", lazy="noload"
    )
    product: Mapped["Product"] = relationship("Product", lazy="noload")

    __table_args__ = (
        UniqueConstraint("category_id", "product_id", name="uq_category_prices_category_product"),
        CheckConstraint("price >= 0", name="ck_category_prices_price_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"CategoryPrice(category_id={self.category_id}, "
            f"product_id={self.product_id}, price={self.price})"
        )


class ClientPriceAssignment(Base, IntegerIDMixin, TimestampMixin):
    """
    Fascia di prezzo assegnata a un cliente.

    Un cliente ha al massimo un'assegnazione: una nuova assegnazione
    sostituisce la precedente (upsert su client_id).
    """

    __tablename__ = "client_price_assignments"

    client_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("price_categories.id", ondelete="CASCADE"),
        nullable=False,
    )

    client: Mapped["Client"] = relationship(
        "Client", back_populates="price_assignment", lazy="noload"
    )
    category: Mapped["PriceCategory"] = relationship("PriceCategory", lazy="selectin")

    def __repr__(self) -> str:
        return f"ClientPriceAssignment(client_id={self.client_id}, category_id={self.category_id})"


class GeneralPrice(Base, IntegerIDMixin, TimestampMixin):
    """Prezzo generale di un prodotto, ultimo livello prima dello zero."""

    __tablename__ = "general_prices"

    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    product: Mapped["Product"] = relationship(
        "Product", back_populates="general_price", lazy="noload"
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_general_prices_price_positive"),
    )

    def __repr__(self) -> str:
        return f"GeneralPrice(product_id={self.product_id}, price={self.price})"


class ClientPrice(Base, IntegerIDMixin, TimestampMixin):
    """
    Prezzo personalizzato per coppia cliente/prodotto.

    valid_from/valid_to delimitano opzionalmente l'intervallo di validità
    [valid_from, valid_to); un estremo NULL è aperto. Senza data di
    riferimento il prezzo è sempre considerato valido.
    """

    __tablename__ = "client_prices"

    client_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    valid_from: Mapped[Optional[datetime.date]] = mapped_column(Date, nullable=True)
    valid_to: Mapped[Optional[datetime.date]] = mapped_column(Date, nullable=True)

    client: Mapped["Client"] = relationship(
        "Client", back_populates="client_prices", lazy="noload"
    )
    product: Mapped["Product"] = relationship("Product", lazy="noload")

    __table_args__ = (
        UniqueConstraint("client_id", "product_id", name="uq_client_prices_client_product"),
        CheckConstraint("price >= 0", name="ck_client_prices_price_positive"),
        CheckConstraint(
            "valid_to IS NULL OR valid_from IS NULL OR valid_to > valid_from",
            name="ck_client_prices_validity_interval",
        ),
    )

    def is_valid_on(self, as_of: Optional[datetime.date]) -> bool:
        """True se il prezzo è valido alla data indicata (None = sempre)."""
        if as_of is None:
            return True
        if self.valid_from is not None and as_of < self.valid_from:
            return False
        if self.valid_to is not None and as_of >= self.valid_to:
            return False
        return True

    def __repr__(self) -> str:
        return (
            f"ClientPrice(client_id={self.client_id}, "
            f"product_id={self.product_id}, price={self.price})"
        )
