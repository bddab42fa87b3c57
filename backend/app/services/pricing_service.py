"""
Service Layer per i Listini Prezzi
Progetto: Materials Ledger (Gestionale Forniture)

Gestione amministrativa dei listini:
- Fasce di prezzo (price_categories)
- Prezzi di fascia, singoli e massivi
- Assegnazione della fascia ai clienti
- Prezzi generali dei prodotti
- Prezzi personalizzati cliente/prodotto

Tutte le scritture sui listini sono upsert (INSERT ... ON CONFLICT DO
UPDATE) sulla chiave di business della tabella: ripetere la stessa
operazione produce lo stesso stato.
"""

import datetime
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    BusinessValidationError,
    ConflictError,
    DuplicateError,
    NotFoundError,
)
from app.models import (
    CategoryPrice,
    Client,
    ClientPrice,
    ClientPriceAssignment,
    GeneralPrice,
    PriceCategory,
    Product,
)
from app.schemas.pricing import (
    BulkUpdateResult,
    CategoryPriceBulkUpdate,
    CategoryProductPrice,
    ClientPriceRead,
    ClientPriceUpsert,
    GeneralPriceRead,
    PriceCategoryCreate,
    PriceCategoryUpdate,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)


class PricingService:
    """
    Service per l'amministrazione dei listini.

    Fornisce metodi asincroni senza dipendenze da FastAPI; il commit
    è responsabilità del chiamante.
    """

    # ------------------------------------------------------------
    # Fasce di prezzo
    # ------------------------------------------------------------

    async def list_categories(self, db: AsyncSession) -> list[PriceCategory]:
        result = await db.execute(select(PriceCategory).order_by(PriceCategory.id.asc()))
        return list(result.scalars().all())

    async def get_category(self, db: AsyncSession, category_id: int) -> PriceCategory:
        """
        Recupera una fascia per ID.

        Raises:
            NotFoundError: Se la fascia non esiste
        """
        result = await db.execute(select(PriceCategory).where(PriceCategory.id == category_id))
        category = result.scalar_one_or_none()
        if category is None:
            logger.warning("Fascia di prezzo non trovata: %s", category_id)
            raise NotFoundError(f"Fascia di prezzo con ID {category_id} non trovata")
        return category

    async def create_category(self, db: AsyncSession, data: PriceCategoryCreate) -> PriceCategory:
        """
        Crea una fascia di prezzo.

        Raises:
            DuplicateError: Se il nome è già in uso
        """
        await self._check_category_name_free(db, data.name)

        category = PriceCategory(name=data.name, description=data.description)
        try:
            db.add(category)
            await db.flush()
            await db.refresh(category)
            logger.info("Creata fascia di prezzo: %s - %s", category.id, category.name)
            return category

        except IntegrityError as e:
            logger.error("Errore IntegrityError creazione fascia: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            raise DuplicateError(f"Fascia di prezzo '{data.name}' già esistente")

    async def update_category(
        self,
        db: AsyncSession,
        category_id: int,
        data: PriceCategoryUpdate,
    ) -> PriceCategory:
        """
        Aggiorna nome e/o descrizione di una fascia.

        La fascia General non può essere rinominata.

        Raises:
            NotFoundError: Se la fascia non esiste
            BusinessValidationError: Rinomina della fascia General
            DuplicateError: Se il nuovo nome è già in uso
        """
        category = await self.get_category(db, category_id)
        update_data = data.model_dump(exclude_unset=True)

        new_name = update_data.get("name")
        if new_name and new_name != category.name:
            if category.is_general:
                raise BusinessValidationError("La fascia General non può essere rinominata")
            await self._check_category_name_free(db, new_name, exclude_id=category_id)

        for field, value in update_data.items():
            setattr(category, field, value)

        try:
            await db.flush()
            await db.refresh(category)
            logger.info("Aggiornata fascia di prezzo: %s - %s", category.id, category.name)
            return category

        except IntegrityError as e:
            logger.error("Errore IntegrityError aggiornamento fascia: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            raise DuplicateError(f"Fascia di prezzo '{new_name}' già esistente")

    # ------------------------------------------------------------
    # Prezzi di fascia
    # ------------------------------------------------------------

    async def upsert_category_price(
        self,
        db: AsyncSession,
        category_id: int,
        product_id: int,
        price: Decimal,
    ) -> CategoryPrice:
        """
        Imposta il prezzo di un prodotto in una fascia (insert o update).

        Raises:
            BusinessValidationError: Fascia o prodotto inesistente
        """
        await self._require_category(db, category_id)
        await self._require_product(db, product_id)

        stmt = pg_insert(CategoryPrice).values(
            category_id=category_id, product_id=product_id, price=price
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_category_prices_category_product",
            set_={"price": stmt.excluded.price, "updated_at": func.now()},
        ).returning(CategoryPrice)

        category_price = await self._execute_upsert(db, stmt, "prezzo di fascia")
        logger.info(
            "Prezzo di fascia impostato: fascia=%s prodotto=%s prezzo=%s",
            category_id, product_id, price,
        )
        return category_price

    async def bulk_update_category_prices(
        self,
        db: AsyncSession,
        data: CategoryPriceBulkUpdate,
    ) -> BulkUpdateResult:
        """
        Imposta in un solo statement i prezzi di più prodotti in una fascia.

        I product_id sconosciuti vengono ignorati e riportati nel risultato.
        """
        await self._require_category(db, data.category_id)

        requested = {item.product_id: item.price for item in data.prices}
        result = await db.execute(select(Product.id).where(Product.id.in_(list(requested))))
        known_ids = set(result.scalars().all())
        skipped = sorted(set(requested) - known_ids)

        if skipped:
            logger.warning(
                "Aggiornamento massivo fascia %s: prodotti ignorati %s", data.category_id, skipped
            )

        if not known_ids:
            return BulkUpdateResult(category_id=data.category_id, updated=0, skipped_product_ids=skipped)

        stmt = pg_insert(CategoryPrice).values(
            [
                {"category_id": data.category_id, "product_id": product_id, "price": requested[product_id]}
                for product_id in sorted(known_ids)
            ]
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_category_prices_category_product",
            set_={"price": stmt.excluded.price, "updated_at": func.now()},
        )

        try:
            await db.execute(stmt)
        except IntegrityError as e:
            logger.error("Errore IntegrityError aggiornamento massivo: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            raise ConflictError("Errore durante l'aggiornamento massivo dei prezzi")

        logger.info(
            "Aggiornamento massivo fascia %s: %s prezzi impostati", data.category_id, len(known_ids)
        )
        return BulkUpdateResult(
            category_id=data.category_id,
            updated=len(known_ids),
            skipped_product_ids=skipped,
        )

    async def list_category_products(
        self,
        db: AsyncSession,
        category_id: int,
    ) -> list[CategoryProductPrice]:
        """Ogni prodotto attivo con il suo prezzo nella fascia (0 se non impostato)."""
        await self.get_category(db, category_id)

        query = (
            select(
                Product.id,
                Product.name,
                Product.code,
                Product.unit,
                CategoryPrice.id,
                func.coalesce(CategoryPrice.price, 0),
            )
            .outerjoin(
                CategoryPrice,
                and_(
                    CategoryPrice.product_id == Product.id,
                    CategoryPrice.category_id == category_id,
                ),
            )
            .where(Product.is_active == True)
            .order_by(Product.name.asc())
        )
        result = await db.execute(query)

        return [
            CategoryProductPrice(
                product_id=product_id,
                product_name=name,
                product_code=code,
                unit=unit,
                price=price,
                category_price_id=category_price_id,
            )
            for product_id, name, code, unit, category_price_id, price in result.all()
        ]

    async def update_category_price(
        self,
        db: AsyncSession,
        category_price_id: int,
        price: Decimal,
    ) -> CategoryPrice:
        """
        Aggiorna il prezzo di una riga di listino esistente.

        Raises:
            NotFoundError: Se la riga non esiste
        """
        result = await db.execute(select(CategoryPrice).where(CategoryPrice.id == category_price_id))
        category_price = result.scalar_one_or_none()
        if category_price is None:
            logger.warning("Prezzo di fascia non trovato: %s", category_price_id)
            raise NotFoundError(f"Prezzo di fascia con ID {category_price_id} non trovato")

        category_price.price = price
        await db.flush()
        await db.refresh(category_price)
        logger.info("Aggiornato prezzo di fascia %s: %s", category_price.id, price)
        return category_price

    # ------------------------------------------------------------
    # Assegnazione fascia ai clienti
    # ------------------------------------------------------------

    async def get_assignment(self, db: AsyncSession, client_id: int) -> Optional[ClientPriceAssignment]:
        """Fascia assegnata al cliente, None se non assegnata."""
        result = await db.execute(
            select(ClientPriceAssignment).where(ClientPriceAssignment.client_id == client_id)
        )
        return result.scalar_one_or_none()

    async def assign_category(
        self,
        db: AsyncSession,
        client_id: int,
        category_id: int,
    ) -> ClientPriceAssignment:
        """
        Assegna una fascia al cliente, sostituendo l'eventuale precedente.

        Raises:
            BusinessValidationError: Cliente o fascia inesistente
        """
        await self._require_client(db, client_id)
        await self._require_category(db, category_id)

        stmt = pg_insert(ClientPriceAssignment).values(client_id=client_id, category_id=category_id)
        stmt = stmt.on_conflict_do_update(
            index_elements=[ClientPriceAssignment.client_id],
            set_={"category_id": stmt.excluded.category_id, "updated_at": func.now()},
        ).returning(ClientPriceAssignment)

        assignment = await self._execute_upsert(db, stmt, "assegnazione fascia")
        logger.info("Cliente %s assegnato alla fascia %s", client_id, category_id)
        return assignment

    # ------------------------------------------------------------
    # Prezzi generali
    # ------------------------------------------------------------

    async def list_general_prices(self, db: AsyncSession) -> list[GeneralPriceRead]:
        query = (
            select(GeneralPrice, Product.name, Product.code)
            .join(Product, Product.id == GeneralPrice.product_id)
            .order_by(Product.name.asc())
        )
        result = await db.execute(query)
        return [
            GeneralPriceRead(
                id=general_price.id,
                product_id=general_price.product_id,
                price=general_price.price,
                product_name=name,
                product_code=code,
            )
            for general_price, name, code in result.all()
        ]

    async def get_general_price(self, db: AsyncSession, product_id: int) -> GeneralPrice:
        """
        Raises:
            NotFoundError: Se il prodotto non ha un prezzo generale
        """
        result = await db.execute(select(GeneralPrice).where(GeneralPrice.product_id == product_id))
        general_price = result.scalar_one_or_none()
        if general_price is None:
            raise NotFoundError(f"Nessun prezzo generale per il prodotto {product_id}")
        return general_price

    async def upsert_general_price(
        self,
        db: AsyncSession,
        product_id: int,
        price: Decimal,
    ) -> GeneralPrice:
        """
        Imposta il prezzo generale di un prodotto.

        Raises:
            BusinessValidationError: Prodotto inesistente
        """
        await self._require_product(db, product_id, active_only=False)

        stmt = pg_insert(GeneralPrice).values(product_id=product_id, price=price)
        stmt = stmt.on_conflict_do_update(
            index_elements=[GeneralPrice.product_id],
            set_={"price": stmt.excluded.price, "updated_at": func.now()},
        ).returning(GeneralPrice)

        general_price = await self._execute_upsert(db, stmt, "prezzo generale")
        logger.info("Prezzo generale prodotto %s: %s", product_id, price)
        return general_price

    async def remove_general_price(self, db: AsyncSession, product_id: int) -> bool:
        """Rimuove il prezzo generale. True se una riga è stata eliminata."""
        result = await db.execute(delete(GeneralPrice).where(GeneralPrice.product_id == product_id))
        removed = bool(result.rowcount)
        if removed:
            logger.info("Rimosso prezzo generale prodotto %s", product_id)
        return removed

    # ------------------------------------------------------------
    # Prezzi personalizzati cliente
    # ------------------------------------------------------------

    async def list_client_prices(
        self,
        db: AsyncSession,
        client_id: int,
        as_of: Optional[datetime.date] = None,
    ) -> list[ClientPriceRead]:
        """
        Prezzi personalizzati di un cliente.

        Con as_of restituisce solo quelli validi alla data.
        """
        query = (
            select(ClientPrice, Product.name)
            .join(Product, Product.id == ClientPrice.product_id)
            .where(ClientPrice.client_id == client_id)
            .order_by(Product.name.asc())
        )
        result = await db.execute(query)

        return [
            ClientPriceRead(
                id=client_price.id,
                client_id=client_price.client_id,
                product_id=client_price.product_id,
                price=client_price.price,
                valid_from=client_price.valid_from,
                valid_to=client_price.valid_to,
                product_name=name,
            )
            for client_price, name in result.all()
            if client_price.is_valid_on(as_of)
        ]

    async def upsert_client_price(self, db: AsyncSession, data: ClientPriceUpsert) -> ClientPrice:
        """
        Imposta il prezzo personalizzato di un cliente per un prodotto.

        Raises:
            BusinessValidationError: Cliente o prodotto inesistente
        """
        await self._require_client(db, data.client_id)
        await self._require_product(db, data.product_id)

        stmt = pg_insert(ClientPrice).values(
            client_id=data.client_id,
            product_id=data.product_id,
            price=data.price,
            valid_from=data.valid_from,
            valid_to=data.valid_to,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_client_prices_client_product",
            set_={
                "price": stmt.excluded.price,
                "valid_from": stmt.excluded.valid_from,
                "valid_to": stmt.excluded.valid_to,
                "updated_at": func.now(),
            },
        ).returning(ClientPrice)

        client_price = await self._execute_upsert(db, stmt, "prezzo cliente")
        logger.info(
            "Prezzo cliente impostato: cliente=%s prodotto=%s prezzo=%s",
            data.client_id, data.product_id, data.price,
        )
        return client_price

    # ----------------------------------------------------------------
    # Metodi privati di supporto
    # ----------------------------------------------------------------

    async def _execute_upsert(self, db: AsyncSession, stmt, label: str):
        try:
            result = await db.execute(stmt, execution_options={"populate_existing": True})
            return result.scalar_one()

        except IntegrityError as e:
            logger.error("Errore IntegrityError upsert %s: %s - %s", label, e.__class__.__name__, e.orig)
            await db.rollback()
            if "foreign key" in str(e.orig).lower():
                raise BusinessValidationError(f"Riferimento inesistente nel {label}")
            raise ConflictError(f"Errore durante il salvataggio del {label}")

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy upsert %s: %s - %s", label, e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError(f"Errore del database durante il salvataggio del {label}")

    async def _check_category_name_free(
        self,
        db: AsyncSession,
        name: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        query = select(PriceCategory.id).where(PriceCategory.name == name)
        if exclude_id is not None:
            query = query.where(PriceCategory.id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one_or_none() is not None:
            logger.warning("Nome fascia già in uso: %s", name)
            raise DuplicateError(f"Fascia di prezzo '{name}' già esistente")

    async def _require_category(self, db: AsyncSession, category_id: int) -> None:
        result = await db.execute(select(PriceCategory.id).where(PriceCategory.id == category_id))
        if result.scalar_one_or_none() is None:
            raise BusinessValidationError(f"Fascia di prezzo {category_id} inesistente")

    async def _require_product(
        self,
        db: AsyncSession,
        product_id: int,
        active_only: bool = True,
    ) -> None:
        query = select(Product.id).where(Product.id == product_id)
        if active_only:
            query = query.where(Product.is_active == True)
        result = await db.execute(query)
        if result.scalar_one_or_none() is None:
            raise BusinessValidationError(f"Prodotto {product_id} inesistente o disattivato")

    async def _require_client(self, db: AsyncSession, client_id: int) -> None:
        result = await db.execute(
            select(Client.id).where(Client.id == client_id, Client.is_active == True)
        )
        if result.scalar_one_or_none() is None:
            raise BusinessValidationError(f"Cliente {client_id} inesistente o disattivato")


pricing_service = PricingService()
