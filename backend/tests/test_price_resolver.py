"""
Unit tests for PriceResolver.

Verifica la precedenza dei listini (cliente > fascia > generale > 0)
e la forma della SELECT unica di risoluzione.
"""

from datetime import date
from decimal import Decimal

import pytest

from app.schemas.pricing import PriceSource
from app.services.price_resolver import PriceResolver


@pytest.fixture
def resolver():
    return PriceResolver()


# ============================================================
# Tests for the resolution statement
# ============================================================


class TestResolutionStatement:
    """La risoluzione è un'unica SELECT con COALESCE dei tre listini."""

    def test_coalesce_order(self, resolver, compile_pg):
        """Test ordine di precedenza nel COALESCE."""
        sql = compile_pg(resolver.build_statement(client_id=1, product_id=2))

        assert "coalesce(client_prices.price, category_prices.price, general_prices.price" in sql

    def test_left_joins_all_price_tables(self, resolver, compile_pg):
        """Test tutti i listini in LEFT OUTER JOIN sul prodotto."""
        sql = compile_pg(resolver.build_statement(client_id=1, product_id=2))

        assert "FROM products" in sql
        assert "LEFT OUTER JOIN client_prices" in sql
        assert "LEFT OUTER JOIN client_price_assignments" in sql
        assert "LEFT OUTER JOIN category_prices" in sql
        assert "LEFT OUTER JOIN general_prices" in sql

    def test_source_case(self, resolver, compile_pg):
        """Test il CASE riporta la sorgente del prezzo."""
        sql = compile_pg(resolver.build_statement(client_id=1, product_id=2))

        assert "CASE WHEN" in sql
        assert "client_prices.price IS NOT NULL" in sql
        assert "general_prices.price IS NOT NULL" in sql

    def test_validity_filter_only_with_date(self, resolver, compile_pg):
        """Test il filtro di validità compare solo con as_of."""
        without_date = compile_pg(resolver.build_statement(1, 2))
        with_date = compile_pg(resolver.build_statement(1, 2, as_of=date(2025, 3, 1)))

        assert "valid_from" not in without_date
        assert "client_prices.valid_from" in with_date
        assert "client_prices.valid_to" in with_date


# ============================================================
# Tests for resolve()
# ============================================================


class TestResolve:
    """Tests for PriceResolver.resolve()."""

    @pytest.mark.asyncio
    async def test_client_override(self, resolver, mock_db, make_result):
        """Test prezzo personalizzato cliente."""
        mock_db.execute.return_value = make_result(one=(Decimal("1500"), "client_override"))

        resolved = await resolver.resolve(mock_db, client_id=1, product_id=2)

        assert resolved.price == Decimal("1500.00")
        assert resolved.source == PriceSource.CLIENT_OVERRIDE

    @pytest.mark.asyncio
    async def test_category_tier(self, resolver, mock_db, make_result):
        """Test prezzo di fascia."""
        mock_db.execute.return_value = make_result(one=(Decimal("1350.00"), "category_tier"))

        resolved = await resolver.resolve(mock_db, 1, 2)

        assert resolved.price == Decimal("1350.00")
        assert resolved.source == PriceSource.CATEGORY_TIER

    @pytest.mark.asyncio
    async def test_nothing_configured_returns_zero(self, resolver, mock_db, make_result):
        """Test nessun listino: prezzo 0, sorgente none."""
        mock_db.execute.return_value = make_result(one=(0, "none"))

        resolved = await resolver.resolve(mock_db, 1, 2)

        assert resolved.price == Decimal("0.00")
        assert resolved.source == PriceSource.NONE

    @pytest.mark.asyncio
    async def test_unknown_product_returns_zero(self, resolver, mock_db, make_result):
        """Test prodotto inesistente: nessuna eccezione, prezzo 0."""
        mock_db.execute.return_value = make_result(one=None)

        resolved = await resolver.resolve(mock_db, 1, 999)

        assert resolved.price == Decimal("0.00")
        assert resolved.source == PriceSource.NONE

    @pytest.mark.asyncio
    async def test_single_query(self, resolver, mock_db, make_result):
        """Test una sola query per risoluzione."""
        mock_db.execute.return_value = make_result(one=(Decimal("900.00"), "general_default"))

        await resolver.resolve(mock_db, 1, 2, as_of=date(2025, 3, 1))

        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_resolve_price_returns_decimal(self, resolver, mock_db, make_result):
        """Test resolve_price restituisce solo il prezzo."""
        mock_db.execute.return_value = make_result(one=(Decimal("900.5"), "general_default"))

        price = await resolver.resolve_price(mock_db, 1, 2)

        assert price == Decimal("900.50")
