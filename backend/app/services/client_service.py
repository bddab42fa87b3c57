"""
Service Layer per l'entità Client
Progetto: Materials Ledger (Gestionale Forniture)

Definisce la logica di business per la gestione dei clienti:
- Soft delete (cancellazione logica)
- Riattivazione di un cliente disattivato alla nuova registrazione
- Validazione proattiva dei codici duplicati
- Logging dettagliato
"""

import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, DuplicateError, NotFoundError
from app.models import Client
from app.schemas.client import ClientCreate, ClientUpdate

# Logger per questo modulo
logger = logging.getLogger(__name__)


class ClientService:
    """
    Service per la gestione delle operazioni CRUD sui clienti.

    Fornisce metodi asincroni per interagire con il database
    in modo centralizzato, senza dipendenze da FastAPI.

    Implementa:
    - Soft Delete: cancellazione logica tramite flag is_active
    - Riattivazione: un cliente disattivato con stesso codice o nome
      viene riattivato invece di crearne uno nuovo
    - Filtro Automatico: di default esclude i clienti eliminati
    """

    async def get_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        include_inactive: bool = False,
    ) -> list[Client]:
        """
        Recupera i clienti ordinati per nome.

        Args:
            db: Sessione database
            search: Termine di ricerca opzionale su nome e codice
            include_inactive: Se True, include anche i clienti soft-deleted

        Returns:
            Lista clienti
        """
        query = select(Client)

        if not include_inactive:
            query = query.where(Client.is_active == True)

        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(Client.name.ilike(search_term), Client.code.ilike(search_term))
            )

        query = query.order_by(Client.name.asc())
        result = await db.execute(query)
        clients = list(result.scalars().all())

        logger.info(
            "Recuperati %s clienti (include_inactive=%s)", len(clients), include_inactive
        )
        return clients

    async def get_by_id(
        self,
        db: AsyncSession,
        client_id: int,
        include_inactive: bool = False,
    ) -> Client:
        """
        Recupera un cliente per ID.

        Raises:
            NotFoundError: Se il cliente non esiste (o è disattivato)
        """
        query = select(Client).where(Client.id == client_id)
        if not include_inactive:
            query = query.where(Client.is_active == True)

        result = await db.execute(query)
        client = result.scalar_one_or_none()

        if client is None:
            logger.warning("Cliente non trovato: %s", client_id)
            raise NotFoundError(f"Cliente con ID {client_id} non trovato")
        return client

    async def create(self, db: AsyncSession, client_data: ClientCreate) -> Client:
        """
        Registra un cliente, riattivandone uno disattivato se possibile.

        Args:
            db: Sessione database
            client_data: Dati del cliente (codice già sanitizzato)

        Returns:
            Il cliente creato o riattivato

        Raises:
            DuplicateError: Se il codice è già usato da un cliente attivo
            ConflictError: Se il database genera un errore imprevisto
        """
        existing = await self._check_code_exists(db, client_data.code)
        if existing:
            logger.warning(
                "Tentativo di creare cliente con codice duplicato: %s (esistente: %s)",
                client_data.code, existing.id,
            )
            raise DuplicateError(f"Codice cliente '{client_data.code}' già in uso")

        client_dict = client_data.model_dump()

        try:
            inactive = await self._find_inactive(db, client_data.code, client_data.name)
            if inactive is not None:
                for field, value in client_dict.items():
                    setattr(inactive, field, value)
                inactive.is_active = True
                await db.flush()
                await db.refresh(inactive)
                logger.info("Riattivato cliente: %s - %s (%s)", inactive.id, inactive.name, inactive.code)
                return inactive

            client = Client(**client_dict)
            db.add(client)
            await db.flush()
            await db.refresh(client)
            logger.info("Creato nuovo cliente: %s - %s (%s)", client.id, client.name, client.code)
            return client

        except IntegrityError as e:
            logger.error("Errore IntegrityError creazione cliente: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            if "code" in str(e.orig).lower():
                raise DuplicateError(f"Codice cliente '{client_data.code}' già in uso")
            raise ConflictError("Errore durante la creazione del cliente")

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy creazione cliente: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError("Errore del database durante la creazione del cliente")

    async def update(
        self,
        db: AsyncSession,
        client_id: int,
        client_data: ClientUpdate,
    ) -> Client:
        """
        Aggiorna un cliente attivo.

        Raises:
            NotFoundError: Se il cliente non esiste
            DuplicateError: Se il nuovo codice è già in uso
        """
        client = await self.get_by_id(db, client_id)

        update_data = client_data.model_dump(exclude_unset=True)

        new_code = update_data.get("code")
        if new_code and new_code != client.code:
            existing = await self._check_code_exists(db, new_code, exclude_id=client_id)
            if existing:
                logger.warning(
                    "Tentativo di aggiornare cliente %s con codice duplicato: %s",
                    client_id, new_code,
                )
                raise DuplicateError(f"Codice cliente '{new_code}' già in uso")

        for field, value in update_data.items():
            setattr(client, field, value)

        try:
            await db.flush()
            await db.refresh(client)
            logger.info("Aggiornato cliente: %s - %s", client.id, client.name)
            return client

        except IntegrityError as e:
            logger.error("Errore IntegrityError aggiornamento cliente: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            raise DuplicateError("Codice cliente già registrato per un altro cliente")

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy aggiornamento cliente: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError("Errore del database durante l'aggiornamento del cliente")

    async def delete(self, db: AsyncSession, client_id: int) -> None:
        """
        Elimina un cliente (soft delete).

        Movimenti e pagamenti restano collegati al cliente disattivato.

        Raises:
            NotFoundError: Se non esiste un cliente attivo con questo ID
        """
        client = await self.get_by_id(db, client_id)

        try:
            client.is_active = False
            await db.flush()
            logger.info("Soft delete cliente: %s - %s", client.id, client.name)

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy eliminazione cliente: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError("Errore del database durante l'eliminazione del cliente")

    # ----------------------------------------------------------------
    # Metodi privati di supporto
    # ----------------------------------------------------------------

    async def _check_code_exists(
        self,
        db: AsyncSession,
        code: str,
        exclude_id: Optional[int] = None,
    ) -> Optional[Client]:
        """Cliente attivo con questo codice, se esiste."""
        query = select(Client).where(Client.code == code, Client.is_active == True)
        if exclude_id is not None:
            query = query.where(Client.id != exclude_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def _find_inactive(self, db: AsyncSession, code: str, name: str) -> Optional[Client]:
        """Primo cliente disattivato con stesso codice o nome."""
        query = (
            select(Client)
            .where(
                or_(Client.code == code, Client.name == name),
                Client.is_active == False,
            )
            .order_by(Client.id.asc())
            .limit(1)
            .with_for_update()
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()
