"""
Modello SQLAlchemy per l'entità Client
Progetto: Materials Ledger (Gestionale Forniture)

Rappresenta l'anagrafica dei clienti che ritirano materiale.
"""


from __future__ import annotations
from typing import Optional, TYPE_CHECKING, List

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import IntegerIDMixin, SoftDeleteMixin, TimestampMixin

# Import per type hinting relazioni (evita circular import)
if TYPE_CHECKING:
    from app.models.consumption import ConsumptionEntry
    from app.models.payment import ClientPayment
    from app.models.pricing import ClientPrice, ClientPriceAssignment


class Client(Base, IntegerIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    Modello per l'anagrafica clienti.

    Il codice è una chiave di business univoca anche tra i clienti
    disattivati: una nuova registrazione con lo stesso codice (o nome)
    riattiva la riga esistente invece di inserirne una nuova.

    Attributes:
        id: Primary key intera
        code: Codice cliente univoco (solo lettere, numeri, '-' e '_')
        name: Nome o ragione sociale
        address: Indirizzo
        phone: Telefono
        email: Email
        is_active: Flag soft delete
        created_at: Data/ora creazione record
        updated_at: Data/ora ultimo aggiornamento

    Relationships:
        price_assignment: Categoria prezzi assegnata (al massimo una)
        client_prices: Prezzi personalizzati del cliente
        consumption_entries: Movimenti di consumo
        payments: Pagamenti registrati
    """

    __tablename__ = "clients"

    # ------------------------------------------------------------
    # Colonne Anagrafiche
    # ------------------------------------------------------------
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Nome o ragione sociale",
    )

    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        doc="Codice cliente univoco",
    )

    # ------------------------------------------------------------
    # Colonne Contatto
    # ------------------------------------------------------------
    address: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Indirizzo",
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        doc="Numero di telefono",
    )

    email: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        doc="Indirizzo email",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    price_assignment: Mapped[Optional["ClientPriceAssignment"]] = relationship(
        "ClientPriceAssignment",
        back_populates="client",
        uselist=False,
        lazy="noload",
        doc="Categoria prezzi assegnata al cliente",
    )

    client_prices: Mapped[List["ClientPrice"]] = relationship(
        "ClientPrice",
        back_populates="client",
        lazy="noload",
        doc="Prezzi personalizzati del cliente",
    )

    consumption_entries: Mapped[List["ConsumptionEntry"]] = relationship(
        "ConsumptionEntry",
        back_populates="client",
        lazy="noload",
        doc="Movimenti di consumo del cliente",
    )

    payments: Mapped[List["ClientPayment"]] = relationship(
        "ClientPayment",
        back_populates="client",
        lazy="noload",
        doc="Pagamenti effettuati dal cliente",
    )

    __table_args__ = (
        Index("ix_clients_name", "name"),
        Index("ix_clients_active_name", "is_active", "name"),
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, code={self.code}, name={self.name})>"
