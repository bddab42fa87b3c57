"""
Router FastAPI per il Catalogo Prodotti
Progetto: Materials Ledger (Gestionale Forniture)
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from app.services.product_service import ProductService

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/products",
    tags=["Prodotti"],
)


def get_product_service() -> ProductService:
    """Dependency per ottenere un'istanza del ProductService."""
    return ProductService()


@router.get(
    "/",
    name="prodotti_lista",
    summary="Lista prodotti",
    description="Recupera i prodotti attivi ordinati per ID.",
    response_model=list[ProductRead],
    status_code=status.HTTP_200_OK,
)
async def get_products(
    include_inactive: bool = Query(False, description="Includi prodotti eliminati"),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> list[ProductRead]:
    products = await service.get_all(db, include_inactive=include_inactive)
    return [ProductRead.model_validate(p) for p in products]


@router.get(
    "/{product_id}",
    name="prodotto_dettaglio",
    summary="Dettaglio prodotto",
    description="Recupera un prodotto, anche se disattivato (per la modifica).",
    response_model=ProductRead,
    status_code=status.HTTP_200_OK,
)
async def get_product(
    product_id: int,
    include_inactive: bool = Query(True, description="Includi prodotti eliminati"),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    product = await service.get_by_id(db, product_id, include_inactive=include_inactive)
    return ProductRead.model_validate(product)


@router.post(
    "/",
    name="prodotto_crea",
    summary="Crea prodotto",
    description="Crea un prodotto; un prezzo positivo viene registrato anche come prezzo generale.",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    data: ProductCreate,
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    product = await service.create(db, data)
    await db.commit()
    return ProductRead.model_validate(product)


@router.put(
    "/{product_id}",
    name="prodotto_aggiorna",
    summary="Aggiorna prodotto",
    description="Aggiorna un prodotto; general_price=0 rimuove il prezzo generale.",
    response_model=ProductRead,
    status_code=status.HTTP_200_OK,
)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    product = await service.update(db, product_id, data)
    await db.commit()
    return ProductRead.model_validate(product)


@router.delete(
    "/{product_id}",
    name="prodotto_elimina",
    summary="Elimina prodotto",
    description="Disattiva un prodotto (soft delete).",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> None:
    await service.delete(db, product_id)
    await db.commit()
