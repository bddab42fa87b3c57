"""
Modelli SQLAlchemy per i Consumi
Progetto: Materials Ledger (Gestionale Forniture)

Contiene:
- ConsumptionEntry: Movimento di consumo giornaliero (ritiro materiale)
- SequenceCounter: Contatore annuale dei numeri progressivi NNN/YYYY
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.models import Base
from app.models.mixins import IntegerIDMixin, SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.product import Product


class ConsumptionEntry(Base, IntegerIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    Modello per i movimenti di consumo.

    unit_price e total_amount sono fotografati al momento della
    registrazione: variazioni successive dei listini non modificano
    i movimenti già registrati.

    Attributes:
        id: Primary key intera
        entry_date: Data del movimento
        client_id: Cliente
        product_id: Prodotto
        quantity: Quantità (3 decimali)
        unit_price: Prezzo unitario applicato
        total_amount: Importo totale applicato
        sequence_number: Numero progressivo annuale (formato NNN/YYYY)
        notes: Note (sanitizzate)
        is_active: Flag soft delete
    """

    __tablename__ = "consumption_entries"

    entry_date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
        doc="Data del movimento",
    )

    client_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        doc="Cliente che ha ritirato il materiale",
    )

    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        doc="Prodotto ritirato",
    )

    quantity: Mapped[Decimal] = mapped_column(
        Numeric(10, 3),
        nullable=False,
        doc="Quantità ritirata",
    )

    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Prezzo unitario al momento della registrazione",
    )

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Importo totale al momento della registrazione",
    )

    sequence_number: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        unique=True,
        doc="Numero progressivo annuale (NNN/YYYY)",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note sanitizzate",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    client: Mapped["Client"] = relationship(
        "Client",
        back_populates="consumption_entries",
        lazy="noload",
    )

    product: Mapped["Product"] = relationship(
        "Product",
        lazy="noload",
    )

    __table_args__ = (
        Index("ix_consumption_entries_entry_date", "entry_date"),
        Index(
            "ix_consumption_entries_date_client_product",
            "entry_date",
            "client_id",
            "product_id",
        ),
        Index("ix_consumption_entries_client_date", "client_id", "entry_date"),
        CheckConstraint("quantity > 0", name="ck_consumption_entries_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_consumption_entries_unit_price_positive"),
    )

    @property
    def line_value(self) -> Decimal:
        """Valore del movimento: quantity * unit_price registrato."""
        return self.quantity * self.unit_price

    def __repr__(self) -> str:
        return (
            f"<ConsumptionEntry(id={self.id}, seq={self.sequence_number}, "
            f"client={self.client_id}, product={self.product_id}, qty={self.quantity})>"
        )


class SequenceCounter(Base):
    """
    Contatore annuale dei numeri progressivi.

    Una riga per anno; last_value è l'ultimo numero assegnato.
    Incrementato solo tramite upsert atomico (SequenceService).
    """

    __tablename__ = "sequence_counters"

    year: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        doc="Anno solare",
    )

    last_value: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Ultimo progressivo assegnato nell'anno",
    )

    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("last_value >= 0", name="ck_sequence_counters_last_value"),
    )

    def __repr__(self) -> str:
        return f"<SequenceCounter(year={self.year}, last_value={self.last_value})>"
