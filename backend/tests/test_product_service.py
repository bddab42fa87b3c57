"""
Unit tests for ProductService.

Il PricingService è mockato: si verifica solo l'allineamento con il
listino generale.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import DuplicateError, NotFoundError
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.pricing_service import PricingService
from app.services.product_service import ProductService


@pytest.fixture
def pricing():
    return AsyncMock(spec=PricingService)


@pytest.fixture
def service(pricing):
    return ProductService(pricing=pricing)


class TestCreate:
    """Tests for ProductService.create()."""

    @pytest.mark.asyncio
    async def test_create_with_general_price(self, service, pricing, mock_db, make_result):
        """Test prezzo positivo registrato anche nel listino generale."""
        mock_db.execute.side_effect = [make_result(scalar=None), make_result(scalar=None)]

        product = await service.create(
            mock_db, ProductCreate(name="SABLE 0/3", code="0/3", general_price=Decimal("1200"))
        )

        mock_db.add.assert_called_once_with(product)
        assert product.code == "03"
        assert product.unit == "T"
        assert product.price == Decimal("1200.00")
        pricing.upsert_general_price.assert_awaited_once()
        assert pricing.upsert_general_price.await_args.args[2] == Decimal("1200.00")

    @pytest.mark.asyncio
    async def test_create_without_price(self, service, pricing, mock_db, make_result):
        """Test senza prezzo: nessun prezzo generale."""
        mock_db.execute.side_effect = [make_result(scalar=None), make_result(scalar=None)]

        product = await service.create(mock_db, ProductCreate(name="GRAVIER", code="G815", unit="m3"))

        assert product.unit == "m3"
        assert product.price == Decimal("0.00")
        pricing.upsert_general_price.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_reactivates(self, service, mock_db, make_result, mock_product):
        """Test riattivazione di un prodotto disattivato."""
        mock_product.is_active = False
        mock_db.execute.side_effect = [make_result(scalar=None), make_result(scalar=mock_product)]

        product = await service.create(mock_db, ProductCreate(name="SABLE 0/3", code="S03"))

        assert product is mock_product
        assert product.is_active is True
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_duplicate(self, service, mock_db, make_result, mock_product):
        """Test nome o codice già usato da un prodotto attivo."""
        mock_db.execute.side_effect = [make_result(scalar=mock_product)]

        with pytest.raises(DuplicateError):
            await service.create(mock_db, ProductCreate(name="SABLE 0/3", code="S03"))


class TestUpdate:
    """Tests for ProductService.update()."""

    @pytest.mark.asyncio
    async def test_zero_price_removes_general_price(self, service, pricing, mock_db, make_result, mock_product):
        """Test general_price=0 rimuove il prezzo generale."""
        mock_db.execute.side_effect = [make_result(scalar=mock_product)]

        product = await service.update(mock_db, 1, ProductUpdate(general_price=Decimal("0")))

        assert product.price == Decimal("0.00")
        pricing.remove_general_price.assert_awaited_once_with(mock_db, 1)
        pricing.upsert_general_price.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_positive_price_upserts(self, service, pricing, mock_db, make_result, mock_product):
        """Test general_price>0 aggiorna il listino generale."""
        mock_db.execute.side_effect = [make_result(scalar=mock_product)]

        await service.update(mock_db, 1, ProductUpdate(general_price=Decimal("1350.5")))

        pricing.upsert_general_price.assert_awaited_once_with(mock_db, 1, Decimal("1350.50"))

    @pytest.mark.asyncio
    async def test_price_untouched_when_absent(self, service, pricing, mock_db, make_result, mock_product):
        """Test prezzo assente: listino generale invariato."""
        mock_db.execute.side_effect = [make_result(scalar=mock_product)]

        product = await service.update(mock_db, 1, ProductUpdate(unit="m3"))

        assert product.unit == "m3"
        pricing.upsert_general_price.assert_not_awaited()
        pricing.remove_general_price.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_missing(self, service, mock_db, make_result):
        """Test prodotto inesistente."""
        mock_db.execute.return_value = make_result(scalar=None)

        with pytest.raises(NotFoundError):
            await service.update(mock_db, 404, ProductUpdate(unit="m3"))


class TestListAndDelete:
    """Tests for get_all and delete."""

    @pytest.mark.asyncio
    async def test_get_all_ordered_by_id(self, service, mock_db, make_result, mock_product, compile_pg):
        """Test lista prodotti attivi ordinata per ID."""
        mock_db.execute.return_value = make_result(scalars=[mock_product])

        products = await service.get_all(mock_db)

        assert products == [mock_product]
        assert "ORDER BY products.id ASC" in compile_pg(mock_db.execute.call_args.args[0])

    @pytest.mark.asyncio
    async def test_soft_delete(self, service, mock_db, make_result, mock_product):
        """Test soft delete."""
        mock_db.execute.return_value = make_result(scalar=mock_product)

        await service.delete(mock_db, 1)

        assert mock_product.is_active is False
