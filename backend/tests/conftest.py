"""
Pytest configuration and fixtures for the service layer tests.

I service vengono testati con una AsyncSession mockata: ogni chiamata
a db.execute() restituisce il risultato successivo di execute.side_effect,
costruito con la fixture make_result.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession


# ============================================================
# Fixtures per AsyncSession Mock
# ============================================================


@pytest.fixture
def mock_db():
    """Crea un mock di AsyncSession."""
    db = AsyncMock(spec=AsyncSession)
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.delete = MagicMock()
    return db


def _make_result(scalar=None, scalars=None, one=None, rows=None, rowcount=0):
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalar_one.return_value = scalar
    result.scalar.return_value = scalar
    result.scalars.return_value.all.return_value = list(scalars or [])
    result.one.return_value = one
    result.one_or_none.return_value = one
    result.all.return_value = list(rows or [])
    result.rowcount = rowcount
    return result


@pytest.fixture
def make_result():
    """Factory per i risultati di db.execute()."""
    return _make_result


def _compile(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


@pytest.fixture
def compile_pg():
    """Compila uno statement SQLAlchemy con il dialetto PostgreSQL."""
    return _compile


# ============================================================
# Oggetti di dominio mock (senza sessione)
# ============================================================


class MockClient:
    """Mock del modello Client."""
    def __init__(self, **kwargs):
        self.id = kwargs.get('id', 1)
        self.name = kwargs.get('name', 'Entreprise Benali')
        self.code = kwargs.get('code', 'CL001')
        self.address = kwargs.get('address', None)
        self.phone = kwargs.get('phone', None)
        self.email = kwargs.get('email', None)
        self.is_active = kwargs.get('is_active', True)
        self.created_at = kwargs.get('created_at', datetime(2025, 1, 1, tzinfo=timezone.utc))
        self.updated_at = kwargs.get('updated_at', datetime(2025, 1, 1, tzinfo=timezone.utc))


class MockProduct:
    """Mock del modello Product."""
    def __init__(self, **kwargs):
        self.id = kwargs.get('id', 1)
        self.name = kwargs.get('name', 'SABLE 0/3')
        self.code = kwargs.get('code', 'S03')
        self.unit = kwargs.get('unit', 'T')
        self.price = kwargs.get('price', Decimal("1200.00"))
        self.is_active = kwargs.get('is_active', True)
        self.created_at = kwargs.get('created_at', datetime(2025, 1, 1, tzinfo=timezone.utc))
        self.updated_at = kwargs.get('updated_at', datetime(2025, 1, 1, tzinfo=timezone.utc))


class MockEntry:
    """Mock del modello ConsumptionEntry."""
    def __init__(self, **kwargs):
        self.id = kwargs.get('id', 1)
        self.entry_date = kwargs.get('entry_date', date(2025, 3, 10))
        self.client_id = kwargs.get('client_id', 1)
        self.product_id = kwargs.get('product_id', 1)
        self.quantity = kwargs.get('quantity', Decimal("10.000"))
        self.unit_price = kwargs.get('unit_price', Decimal("1200.00"))
        self.total_amount = kwargs.get('total_amount', Decimal("12000.00"))
        self.sequence_number = kwargs.get('sequence_number', "001/2025")
        self.notes = kwargs.get('notes', None)
        self.is_active = kwargs.get('is_active', True)
        self.created_at = kwargs.get('created_at', datetime(2025, 3, 10, tzinfo=timezone.utc))


class MockPayment:
    """Mock del modello ClientPayment."""
    def __init__(self, **kwargs):
        self.id = kwargs.get('id', 1)
        self.client_id = kwargs.get('client_id', 1)
        self.payment_date = kwargs.get('payment_date', date(2025, 3, 15))
        self.amount = kwargs.get('amount', Decimal("100.00"))
        self.original_amount = kwargs.get('original_amount', Decimal("119.00"))
        self.payment_type_id = kwargs.get('payment_type_id', 2)
        self.currency = kwargs.get('currency', "DA")
        self.notes = kwargs.get('notes', None)
        self.created_at = kwargs.get('created_at', datetime(2025, 3, 15, tzinfo=timezone.utc))


@pytest.fixture
def mock_client():
    """Crea un mock di Client attivo."""
    return MockClient()


@pytest.fixture
def mock_inactive_client():
    """Crea un mock di Client disattivato."""
    return MockClient(id=7, name="Entreprise Benali", code="CL001", is_active=False)


@pytest.fixture
def mock_product():
    """Crea un mock di Product."""
    return MockProduct()


@pytest.fixture
def mock_entry():
    """Crea un mock di ConsumptionEntry attivo."""
    return MockEntry()


@pytest.fixture
def mock_inactive_entry():
    """Crea un mock di ConsumptionEntry disattivato."""
    return MockEntry(id=9, sequence_number="003/2025", is_active=False, notes="vecchia nota")


@pytest.fixture
def mock_payment():
    """Crea un mock di ClientPayment (assegno da 119.00)."""
    return MockPayment()
