"""
Mixin SQLAlchemy per modelli
Progetto: Materials Ledger (Gestionale Forniture)

Mixin riutilizzabili per chiave primaria intera, timestamp e soft delete.
"""

import datetime

from sqlalchemy import Boolean, DateTime, Integer
from sqlalchemy import event
from sqlalchemy.orm import Mapped, mapped_column, Session
from sqlalchemy.sql import func


class IntegerIDMixin:
    """
    Mixin per chiave primaria intera autoincrementale.

    Gli ID sono esposti all'API come interi e non vengono mai riutilizzati:
    le righe eliminate restano in tabella (soft delete).
    """

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Primary key intera",
    )


class SoftDeleteMixin:
    """
    Mixin per implementare la cancellazione logica (soft delete).

    Aggiunge il campo is_active che, se impostato a False,
    indica che il record è stato "eliminato" ma non rimosso fisicamente.
    Le chiavi esterne verso righe disattivate restano valide.
    """

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default="true",
        nullable=False,
        doc="Flag per soft delete: False = eliminato, True = attivo",
    )


class CreatedAtMixin:
    """Mixin con il solo timestamp di creazione (righe mai aggiornate)."""

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Data/ora di creazione del record",
    )


class TimestampMixin(CreatedAtMixin):
    """
    Mixin per gestione automatica timestamp creazione e aggiornamento.

    - created_at: impostato dal database all'inserimento
    - updated_at: aggiornato dal listener before_flush
    """

    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Data/ora ultimo aggiornamento del record",
    )


# ------------------------------------------------------------
# Event Listeners
# ------------------------------------------------------------
@event.listens_for(Session, "before_flush")
def update_timestamp(session: Session, flush_context, instances) -> None:
    """
    Aggiorna updated_at sugli oggetti nuovi o effettivamente modificati.

    Gli upsert eseguiti con insert().on_conflict_do_update() non passano
    da qui e impostano updated_at esplicitamente.
    """
    now = datetime.datetime.now(datetime.timezone.utc)

    for obj in session.dirty:
        if hasattr(obj, "updated_at") and session.is_modified(obj, include_collections=False):
            obj.updated_at = now

    for obj in session.new:
        if hasattr(obj, "updated_at"):
            obj.updated_at = now
