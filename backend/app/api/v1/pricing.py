"""
Router FastAPI per i Listini Prezzi
Progetto: Materials Ledger (Gestionale Forniture)

Definisce gli endpoint API per fasce di prezzo, prezzi di fascia,
assegnazioni, prezzi generali, prezzi personalizzati e risoluzione prezzo.

NOTE: /category-prices/bulk è dichiarata prima di /category-prices/{id}.
"""

import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.pricing import (
    BulkUpdateResult,
    CategoryPriceBulkUpdate,
    CategoryPriceRead,
    CategoryPriceUpdate,
    CategoryPriceUpsert,
    CategoryProductPrice,
    ClientPriceAssignmentRead,
    ClientPriceAssignmentUpsert,
    ClientPriceRead,
    ClientPriceUpsert,
    GeneralPriceRead,
    GeneralPriceUpsert,
    PriceCategoryCreate,
    PriceCategoryRead,
    PriceCategoryUpdate,
    ResolvedPriceRead,
)
from app.services.price_resolver import PriceResolver
from app.services.pricing_service import PricingService

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/pricing",
    tags=["Listini"],
)


# -------------------------------------------------------------------
# Dependency Injection
# -------------------------------------------------------------------

def get_pricing_service() -> PricingService:
    """Dependency per ottenere un'istanza del PricingService."""
    return PricingService()


def get_price_resolver() -> PriceResolver:
    """Dependency per ottenere un'istanza del PriceResolver."""
    return PriceResolver()


# -------------------------------------------------------------------
# Risoluzione prezzo
# -------------------------------------------------------------------

@router.get(
    "/resolve",
    name="prezzo_risolvi",
    summary="Risolvi prezzo",
    description="Prezzo unitario applicabile a cliente/prodotto e listino di provenienza.",
    response_model=ResolvedPriceRead,
    status_code=status.HTTP_200_OK,
)
async def resolve_price(
    client_id: int = Query(..., description="ID cliente"),
    product_id: int = Query(..., description="ID prodotto"),
    as_of: Optional[datetime.date] = Query(None, description="Data di riferimento"),
    db: AsyncSession = Depends(get_db),
    resolver: PriceResolver = Depends(get_price_resolver),
) -> ResolvedPriceRead:
    resolved = await resolver.resolve(db, client_id, product_id, as_of=as_of)
    return ResolvedPriceRead(
        client_id=client_id,
        product_id=product_id,
        as_of=as_of,
        price=resolved.price,
        source=resolved.source,
    )


# -------------------------------------------------------------------
# Fasce di prezzo
# -------------------------------------------------------------------

@router.get(
    "/categories",
    name="fasce_lista",
    summary="Lista fasce di prezzo",
    response_model=list[PriceCategoryRead],
)
async def list_categories(
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> list[PriceCategoryRead]:
    categories = await service.list_categories(db)
    return [PriceCategoryRead.model_validate(c) for c in categories]


@router.post(
    "/categories",
    name="fascia_crea",
    summary="Crea fascia di prezzo",
    response_model=PriceCategoryRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    data: PriceCategoryCreate,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> PriceCategoryRead:
    category = await service.create_category(db, data)
    await db.commit()
    return PriceCategoryRead.model_validate(category)


@router.put(
    "/categories/{category_id}",
    name="fascia_aggiorna",
    summary="Aggiorna fascia di prezzo",
    response_model=PriceCategoryRead,
)
async def update_category(
    category_id: int,
    data: PriceCategoryUpdate,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> PriceCategoryRead:
    category = await service.update_category(db, category_id, data)
    await db.commit()
    return PriceCategoryRead.model_validate(category)


@router.get(
    "/categories/{category_id}/products",
    name="fascia_listino",
    summary="Listino di una fascia",
    description="Tutti i prodotti attivi con il prezzo nella fascia (0 se non impostato).",
    response_model=list[CategoryProductPrice],
)
async def list_category_products(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> list[CategoryProductPrice]:
    return await service.list_category_products(db, category_id)


# -------------------------------------------------------------------
# Prezzi di fascia
# -------------------------------------------------------------------

@router.put(
    "/category-prices",
    name="prezzo_fascia_imposta",
    summary="Imposta prezzo di fascia",
    response_model=CategoryPriceRead,
)
async def upsert_category_price(
    data: CategoryPriceUpsert,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> CategoryPriceRead:
    category_price = await service.upsert_category_price(
        db, data.category_id, data.product_id, data.price
    )
    await db.commit()
    return CategoryPriceRead.model_validate(category_price)


@router.put(
    "/category-prices/bulk",
    name="prezzi_fascia_massivo",
    summary="Aggiornamento massivo prezzi di fascia",
    response_model=BulkUpdateResult,
)
async def bulk_update_category_prices(
    data: CategoryPriceBulkUpdate,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> BulkUpdateResult:
    result = await service.bulk_update_category_prices(db, data)
    await db.commit()
    return result


@router.put(
    "/category-prices/{category_price_id}",
    name="prezzo_fascia_aggiorna",
    summary="Aggiorna prezzo di fascia per ID",
    response_model=CategoryPriceRead,
)
async def update_category_price(
    category_price_id: int,
    data: CategoryPriceUpdate,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> CategoryPriceRead:
    category_price = await service.update_category_price(db, category_price_id, data.price)
    await db.commit()
    return CategoryPriceRead.model_validate(category_price)


# -------------------------------------------------------------------
# Assegnazioni fascia
# -------------------------------------------------------------------

@router.get(
    "/assignments/{client_id}",
    name="assegnazione_dettaglio",
    summary="Fascia assegnata al cliente",
    description="Restituisce null se al cliente non è assegnata alcuna fascia.",
    response_model=Optional[ClientPriceAssignmentRead],
)
async def get_assignment(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> Optional[ClientPriceAssignmentRead]:
    assignment = await service.get_assignment(db, client_id)
    if assignment is None:
        return None
    category = await service.get_category(db, assignment.category_id)
    return ClientPriceAssignmentRead(
        client_id=assignment.client_id,
        category_id=assignment.category_id,
        category_name=category.name,
    )


@router.put(
    "/assignments",
    name="assegnazione_imposta",
    summary="Assegna fascia al cliente",
    response_model=ClientPriceAssignmentRead,
)
async def assign_category(
    data: ClientPriceAssignmentUpsert,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> ClientPriceAssignmentRead:
    assignment = await service.assign_category(db, data.client_id, data.category_id)
    category = await service.get_category(db, assignment.category_id)
    await db.commit()
    return ClientPriceAssignmentRead(
        client_id=assignment.client_id,
        category_id=assignment.category_id,
        category_name=category.name,
    )


# -------------------------------------------------------------------
# Prezzi generali
# -------------------------------------------------------------------

@router.get(
    "/general-prices",
    name="prezzi_generali_lista",
    summary="Lista prezzi generali",
    response_model=list[GeneralPriceRead],
)
async def list_general_prices(
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> list[GeneralPriceRead]:
    return await service.list_general_prices(db)


@router.get(
    "/general-prices/{product_id}",
    name="prezzo_generale_dettaglio",
    summary="Prezzo generale di un prodotto",
    response_model=GeneralPriceRead,
)
async def get_general_price(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> GeneralPriceRead:
    general_price = await service.get_general_price(db, product_id)
    return GeneralPriceRead.model_validate(general_price)


@router.put(
    "/general-prices",
    name="prezzo_generale_imposta",
    summary="Imposta prezzo generale",
    response_model=GeneralPriceRead,
)
async def upsert_general_price(
    data: GeneralPriceUpsert,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> GeneralPriceRead:
    general_price = await service.upsert_general_price(db, data.product_id, data.price)
    await db.commit()
    return GeneralPriceRead.model_validate(general_price)


@router.delete(
    "/general-prices/{product_id}",
    name="prezzo_generale_rimuovi",
    summary="Rimuovi prezzo generale",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_general_price(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> None:
    await service.remove_general_price(db, product_id)
    await db.commit()


# -------------------------------------------------------------------
# Prezzi personalizzati cliente
# -------------------------------------------------------------------

@router.get(
    "/client-prices/{client_id}",
    name="prezzi_cliente_lista",
    summary="Prezzi personalizzati del cliente",
    response_model=list[ClientPriceRead],
)
async def list_client_prices(
    client_id: int,
    as_of: Optional[datetime.date] = Query(None, description="Solo prezzi validi alla data"),
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> list[ClientPriceRead]:
    return await service.list_client_prices(db, client_id, as_of=as_of)


@router.put(
    "/client-prices",
    name="prezzo_cliente_imposta",
    summary="Imposta prezzo personalizzato",
    response_model=ClientPriceRead,
)
async def upsert_client_price(
    data: ClientPriceUpsert,
    db: AsyncSession = Depends(get_db),
    service: PricingService = Depends(get_pricing_service),
) -> ClientPriceRead:
    client_price = await service.upsert_client_price(db, data)
    await db.commit()
    return ClientPriceRead.model_validate(client_price)
