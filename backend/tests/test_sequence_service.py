"""
Unit tests for SequenceService.

Verifica il formato NNN/YYYY e l'incremento atomico del contatore annuale.
"""

import pytest

from app.core.exceptions import BusinessValidationError
from app.services.sequence_service import SequenceService, format_sequence


@pytest.fixture
def service():
    return SequenceService()


# ============================================================
# Tests for format_sequence
# ============================================================


class TestFormatSequence:
    """Tests for the NNN/YYYY formatting."""

    def test_zero_padded(self):
        """Test riempimento a 3 cifre."""
        assert format_sequence(7, 2024) == "007/2024"
        assert format_sequence(42, 2024) == "042/2024"

    def test_grows_past_three_digits(self):
        """Test oltre 999 nessun troncamento."""
        assert format_sequence(999, 2024) == "999/2024"
        assert format_sequence(1000, 2024) == "1000/2024"

    def test_custom_digits(self):
        """Test cifre minime personalizzate."""
        assert format_sequence(5, 2025, min_digits=4) == "0005/2025"

    def test_non_positive_value_rejected(self):
        """Test progressivo 0 non valido."""
        with pytest.raises(BusinessValidationError):
            format_sequence(0, 2024)


# ============================================================
# Tests for next_sequence / peek_sequence
# ============================================================


class TestNextSequence:
    """Tests for SequenceService.next_sequence()."""

    @pytest.mark.asyncio
    async def test_returns_formatted_value(self, service, mock_db, make_result):
        """Test il valore restituito dal contatore viene formattato."""
        mock_db.execute.return_value = make_result(scalar=12)

        assert await service.next_sequence(mock_db, 2024) == "012/2024"

    @pytest.mark.asyncio
    async def test_first_value_of_year(self, service, mock_db, make_result):
        """Test primo valore di un anno nuovo."""
        mock_db.execute.return_value = make_result(scalar=1)

        assert await service.next_sequence(mock_db, 2026) == "001/2026"

    @pytest.mark.asyncio
    async def test_single_atomic_upsert(self, service, mock_db, make_result, compile_pg):
        """Test un solo statement INSERT ... ON CONFLICT ... RETURNING."""
        mock_db.execute.return_value = make_result(scalar=3)

        await service.next_sequence(mock_db, 2024)

        assert mock_db.execute.await_count == 1
        sql = compile_pg(mock_db.execute.call_args.args[0])
        assert sql.startswith("INSERT INTO sequence_counters")
        assert "ON CONFLICT (year) DO UPDATE" in sql
        assert "sequence_counters.last_value +" in sql
        assert "RETURNING sequence_counters.last_value" in sql

    @pytest.mark.asyncio
    async def test_invalid_year(self, service, mock_db):
        """Test anno non valido."""
        with pytest.raises(BusinessValidationError):
            await service.next_sequence(mock_db, 0)
        mock_db.execute.assert_not_awaited()


class TestPeekSequence:
    """Tests for SequenceService.peek_sequence()."""

    @pytest.mark.asyncio
    async def test_no_counter_yet(self, service, mock_db, make_result):
        """Test anno senza contatore: anteprima 001."""
        mock_db.execute.return_value = make_result(scalar=None)

        assert await service.peek_sequence(mock_db, 2025) == "001/2025"

    @pytest.mark.asyncio
    async def test_next_after_last(self, service, mock_db, make_result, compile_pg):
        """Test anteprima senza consumare il valore."""
        mock_db.execute.return_value = make_result(scalar=41)

        assert await service.peek_sequence(mock_db, 2025) == "042/2025"
        sql = compile_pg(mock_db.execute.call_args.args[0])
        assert sql.startswith("SELECT")
        mock_db.flush.assert_not_awaited()
