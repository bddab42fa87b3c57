"""
Service Layer per il Catalogo Prodotti
Progetto: Materials Ledger (Gestionale Forniture)

Contiene le funzioni di business logic per:
- CRUD prodotti con soft delete
- Riattivazione di un prodotto disattivato con stesso nome o codice
- Allineamento del prezzo base con il listino generale
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, DuplicateError, NotFoundError
from app.models import Product
from app.schemas.pricing import quantize_price
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.pricing_service import PricingService, pricing_service

logger = logging.getLogger(__name__)


class ProductService:
    """
    Service per la gestione dei prodotti.

    Il prezzo base del prodotto e il prezzo generale restano allineati:
    un prezzo positivo viene scritto anche in general_prices, un prezzo
    0 in aggiornamento rimuove il prezzo generale.
    """

    def __init__(self, pricing: Optional[PricingService] = None) -> None:
        self.pricing = pricing or pricing_service

    async def get_all(self, db: AsyncSession, include_inactive: bool = False) -> list[Product]:
        query = select(Product)
        if not include_inactive:
            query = query.where(Product.is_active == True)
        query = query.order_by(Product.id.asc())

        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(
        self,
        db: AsyncSession,
        product_id: int,
        include_inactive: bool = False,
    ) -> Product:
        """
        Recupera un prodotto per ID.

        Raises:
            NotFoundError: Se il prodotto non esiste (o è disattivato)
        """
        query = select(Product).where(Product.id == product_id)
        if not include_inactive:
            query = query.where(Product.is_active == True)
        result = await db.execute(query)
        product = result.scalar_one_or_none()

        if not product:
            logger.warning("Prodotto non trovato: %s", product_id)
            raise NotFoundError(f"Prodotto con ID {product_id} non trovato")
        return product

    async def create(self, db: AsyncSession, data: ProductCreate) -> Product:
        """
        Crea un prodotto, riattivandone uno disattivato se possibile.

        Raises:
            DuplicateError: Nome o codice già usati da un prodotto attivo
            ConflictError: Errore imprevisto del database
        """
        existing = await self._find_by_name_or_code(db, data.name, data.code, is_active=True)
        if existing:
            logger.warning(
                "Tentativo di creare prodotto duplicato: %s/%s (esistente: %s)",
                data.name, data.code, existing.id,
            )
            raise DuplicateError(f"Prodotto '{data.name}' o codice '{data.code}' già esistente")

        price = quantize_price(data.general_price) or Decimal("0.00")
        values = {
            "name": data.name,
            "code": data.code,
            "unit": data.unit or settings.default_unit,
            "price": price,
        }

        try:
            product = await self._find_by_name_or_code(db, data.name, data.code, is_active=False)
            if product is not None:
                for field, value in values.items():
                    setattr(product, field, value)
                product.is_active = True
                action = "Riattivato"
            else:
                product = Product(**values)
                db.add(product)
                action = "Creato"

            await db.flush()
            await db.refresh(product)

        except IntegrityError as e:
            logger.error("Errore IntegrityError creazione prodotto: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            raise DuplicateError(f"Prodotto '{data.name}' o codice '{data.code}' già esistente")

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy creazione prodotto: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError("Errore del database durante la creazione del prodotto")

        if price > 0:
            await self.pricing.upsert_general_price(db, product.id, price)

        logger.info("%s prodotto: %s - %s (%s)", action, product.id, product.name, product.code)
        return product

    async def update(self, db: AsyncSession, product_id: int, data: ProductUpdate) -> Product:
        """
        Aggiorna un prodotto attivo.

        general_price > 0 aggiorna anche il listino generale, = 0 lo rimuove.

        Raises:
            NotFoundError: Se il prodotto non esiste
            DuplicateError: Nome o codice già in uso
        """
        product = await self.get_by_id(db, product_id)
        update_data = data.model_dump(exclude_unset=True)
        general_price = update_data.pop("general_price", None)

        new_name = update_data.get("name")
        new_code = update_data.get("code")
        if (new_name and new_name != product.name) or (new_code and new_code != product.code):
            clash = await self._find_by_name_or_code(
                db,
                new_name or product.name,
                new_code or product.code,
                is_active=True,
                exclude_id=product_id,
            )
            if clash:
                raise DuplicateError("Nome o codice prodotto già in uso")

        if "unit" in update_data and not update_data["unit"]:
            update_data["unit"] = settings.default_unit

        for field, value in update_data.items():
            setattr(product, field, value)
        if general_price is not None:
            product.price = quantize_price(general_price)

        try:
            await db.flush()
            await db.refresh(product)

        except IntegrityError as e:
            logger.error("Errore IntegrityError aggiornamento prodotto: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            raise DuplicateError("Nome o codice prodotto già in uso")

        if general_price is not None:
            if general_price > 0:
                await self.pricing.upsert_general_price(db, product.id, product.price)
            else:
                await self.pricing.remove_general_price(db, product.id)

        logger.info("Aggiornato prodotto: %s - %s", product.id, product.name)
        return product

    async def delete(self, db: AsyncSession, product_id: int) -> None:
        """
        Disattiva un prodotto (soft delete).

        Raises:
            NotFoundError: Se non esiste un prodotto attivo con questo ID
        """
        product = await self.get_by_id(db, product_id)
        product.is_active = False
        await db.flush()
        logger.info("Soft delete prodotto: %s - %s", product.id, product.name)

    async def _find_by_name_or_code(
        self,
        db: AsyncSession,
        name: str,
        code: str,
        is_active: bool,
        exclude_id: Optional[int] = None,
    ) -> Optional[Product]:
        query = select(Product).where(
            or_(Product.name == name, Product.code == code),
            Product.is_active == is_active,
        )
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        query = query.order_by(Product.id.asc()).limit(1)
        result = await db.execute(query)
        return result.scalar_one_or_none()
