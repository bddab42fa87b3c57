"""
Modelli SQLAlchemy per i Pagamenti
Progetto: Materials Ledger (Gestionale Forniture)

Contiene:
- PaymentType: Tipi di pagamento (cash, check, ...)
- ClientPayment: Pagamenti registrati dai clienti
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import CreatedAtMixin, IntegerIDMixin

if TYPE_CHECKING:
    from app.models.client import Client


class PaymentType(Base, IntegerIDMixin):
    """Tipo di pagamento. Valori iniziali: 'cash', 'check'."""

    __tablename__ = "payment_types"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"PaymentType(id={self.id!r}, name={self.name!r})"


class ClientPayment(Base, IntegerIDMixin, CreatedAtMixin):
    """
    Modello per i pagamenti dei clienti.

    original_amount è l'importo inserito dall'operatore e non viene mai
    sovrascritto; amount è l'importo normalizzato in base al tipo di
    pagamento (es. scorporo imposta per gli assegni) ed è quello usato
    nei saldi.

    Attributes:
        id: Primary key intera
        client_id: Cliente
        payment_date: Data del pagamento
        amount: Importo normalizzato
        original_amount: Importo inserito
        payment_type_id: Tipo di pagamento
        currency: Valuta (default 'DA')
        notes: Note
        created_at: Data/ora registrazione
    """

    __tablename__ = "client_payments"

    client_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        doc="Cliente che ha effettuato il pagamento",
    )

    payment_date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
        doc="Data del pagamento",
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Importo normalizzato (usato nei saldi)",
    )

    original_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Importo originale inserito",
    )

    payment_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payment_types.id"),
        nullable=False,
        doc="Tipo di pagamento",
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="DA",
        server_default="DA",
        doc="Valuta",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note aggiuntive sul pagamento",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    client: Mapped["Client"] = relationship(
        "Client",
        back_populates="payments",
        lazy="noload",
    )

    payment_type: Mapped["PaymentType"] = relationship(
        "PaymentType",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_client_payments_client_date", "client_id", "payment_date"),
        CheckConstraint("original_amount > 0", name="ck_client_payments_original_positive"),
        CheckConstraint("amount >= 0", name="ck_client_payments_amount_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<ClientPayment(id={self.id}, client={self.client_id}, "
            f"amount={self.amount}, original={self.original_amount})>"
        )
