"""
Risoluzione Prezzi
Progetto: Materials Ledger (Gestionale Forniture)

Determina il prezzo unitario applicabile a una coppia cliente/prodotto
seguendo la precedenza dei listini:

    1. Prezzo personalizzato cliente (client_prices)
    2. Prezzo della fascia assegnata al cliente (category_prices)
    3. Prezzo generale del prodotto (general_prices)
    4. 0

La risoluzione avviene con un'unica SELECT: i tre listini sono uniti in
LEFT JOIN al prodotto e collassati con COALESCE, mentre un CASE riporta
il livello da cui proviene il prezzo.
"""

import datetime
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import Select, and_, case, func, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import (
    CategoryPrice,
    ClientPrice,
    ClientPriceAssignment,
    GeneralPrice,
    Product,
)
from app.schemas.pricing import PriceSource, ResolvedPrice

# Logger per questo modulo
logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class PriceResolver:
    """
    Service per la risoluzione del prezzo unitario.

    Non modifica il database: la stessa coppia (cliente, prodotto) sullo
    stesso stato dei listini restituisce sempre lo stesso prezzo.
    """

    def build_statement(
        self,
        client_id: int,
        product_id: int,
        as_of: Optional[datetime.date] = None,
    ) -> Select:
        """
        Costruisce la SELECT di risoluzione.

        Con as_of il prezzo personalizzato è considerato solo se valido
        alla data: valid_from <= as_of < valid_to, estremi NULL aperti.
        """
        client_price_on = and_(
            ClientPrice.product_id == Product.id,
            ClientPrice.client_id == client_id,
        )
        if as_of is not None:
            client_price_on = and_(
                client_price_on,
                or_(ClientPrice.valid_from.is_(None), ClientPrice.valid_from <= as_of),
                or_(ClientPrice.valid_to.is_(None), ClientPrice.valid_to > as_of),
            )

        source = case(
            (ClientPrice.price.is_not(None), literal(PriceSource.CLIENT_OVERRIDE.value)),
            (CategoryPrice.price.is_not(None), literal(PriceSource.CATEGORY_TIER.value)),
            (GeneralPrice.price.is_not(None), literal(PriceSource.GENERAL_DEFAULT.value)),
            else_=literal(PriceSource.NONE.value),
        )

        return (
            select(
                func.coalesce(
                    ClientPrice.price,
                    CategoryPrice.price,
                    GeneralPrice.price,
                    0,
                ).label("price"),
                source.label("source"),
            )
            .select_from(Product)
            .outerjoin(ClientPrice, client_price_on)
            .outerjoin(
                ClientPriceAssignment,
                ClientPriceAssignment.client_id == client_id,
            )
            .outerjoin(
                CategoryPrice,
                and_(
                    CategoryPrice.category_id == ClientPriceAssignment.category_id,
                    CategoryPrice.product_id == Product.id,
                ),
            )
            .outerjoin(GeneralPrice, GeneralPrice.product_id == Product.id)
            .where(Product.id == product_id)
        )

    async def resolve(
        self,
        db: AsyncSession,
        client_id: int,
        product_id: int,
        as_of: Optional[datetime.date] = None,
    ) -> ResolvedPrice:
        """
        Risolve il prezzo unitario e la sua provenienza.

        Args:
            db: Sessione database
            client_id: ID cliente
            product_id: ID prodotto
            as_of: Data di riferimento per la validità dei prezzi personalizzati

        Returns:
            ResolvedPrice: prezzo (>= 0, 2 decimali) e livello di provenienza.
            Se nessun listino è configurato, prezzo 0 e sorgente "none".
        """
        result = await db.execute(self.build_statement(client_id, product_id, as_of))
        row = result.one_or_none()

        if row is None:
            logger.warning(
                "Nessun prodotto %s per la risoluzione prezzo (cliente %s)",
                product_id, client_id,
            )
            return ResolvedPrice(price=ZERO, source=PriceSource.NONE)

        price, source = row
        resolved = ResolvedPrice(
            price=Decimal(str(price)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            source=PriceSource(source),
        )
        logger.debug(
            "Prezzo risolto cliente=%s prodotto=%s: %s (%s)",
            client_id, product_id, resolved.price, resolved.source.value,
        )
        return resolved

    async def resolve_price(
        self,
        db: AsyncSession,
        client_id: int,
        product_id: int,
        as_of: Optional[datetime.date] = None,
    ) -> Decimal:
        """Come resolve(), restituisce solo il prezzo."""
        resolved = await self.resolve(db, client_id, product_id, as_of)
        return resolved.price


price_resolver = PriceResolver()
