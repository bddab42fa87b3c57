"""
Unit tests for ClientService and client schemas.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import DuplicateError, NotFoundError
from app.schemas.client import ClientCreate, ClientUpdate, sanitize_code
from app.services.client_service import ClientService


@pytest.fixture
def service():
    return ClientService()


# ============================================================
# Tests for schema normalisation
# ============================================================


class TestClientSchema:
    """Tests for code sanitisation and field normalisation."""

    def test_code_sanitized(self):
        """Test rimozione caratteri non ammessi dal codice."""
        data = ClientCreate(name="  Entreprise Benali ", code="CL/01.a")

        assert data.code == "CL01a"
        assert data.name == "Entreprise Benali"

    def test_code_keeps_dash_and_underscore(self):
        """Test '-' e '_' ammessi."""
        assert sanitize_code("CL-01_b") == "CL-01_b"

    def test_code_without_valid_chars(self):
        """Test codice vuoto dopo la sanitizzazione."""
        with pytest.raises(PydanticValidationError):
            ClientCreate(name="Benali", code="///")

    def test_phone_and_blank_email(self):
        """Test telefono senza spazi, email vuota → None."""
        data = ClientCreate(name="Benali", code="CL1", phone="+213 555 12 34", email="")

        assert data.phone == "+2135551234"
        assert data.email is None

    def test_update_is_partial(self):
        """Test aggiornamento parziale."""
        data = ClientUpdate(phone="0555")

        assert data.model_dump(exclude_unset=True) == {"phone": "0555"}


# ============================================================
# Tests for ClientService
# ============================================================


class TestClientService:
    """Tests for create / reactivate / update / delete."""

    @pytest.mark.asyncio
    async def test_create_new(self, service, mock_db, make_result):
        """Test creazione di un nuovo cliente."""
        mock_db.execute.side_effect = [make_result(scalar=None), make_result(scalar=None)]

        client = await service.create(mock_db, ClientCreate(name="Benali", code="CL001"))

        mock_db.add.assert_called_once_with(client)
        assert client.code == "CL001"
        assert client.name == "Benali"

    @pytest.mark.asyncio
    async def test_create_reactivates_inactive(self, service, mock_db, make_result, mock_inactive_client):
        """Test riattivazione di un cliente disattivato con stesso codice."""
        mock_db.execute.side_effect = [
            make_result(scalar=None),
            make_result(scalar=mock_inactive_client),
        ]

        client = await service.create(
            mock_db, ClientCreate(name="Benali SARL", code="CL001", phone="0555")
        )

        assert client is mock_inactive_client
        assert client.id == 7
        assert client.is_active is True
        assert client.name == "Benali SARL"
        assert client.phone == "0555"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_duplicate_active_code(self, service, mock_db, make_result, mock_client):
        """Test codice già usato da un cliente attivo."""
        mock_db.execute.side_effect = [make_result(scalar=mock_client)]

        with pytest.raises(DuplicateError):
            await service.create(mock_db, ClientCreate(name="Altro", code="CL001"))

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, service, mock_db, make_result):
        """Test cliente inesistente."""
        mock_db.execute.return_value = make_result(scalar=None)

        with pytest.raises(NotFoundError):
            await service.get_by_id(mock_db, 404)

    @pytest.mark.asyncio
    async def test_update(self, service, mock_db, make_result, mock_client):
        """Test aggiornamento dei soli campi inviati."""
        mock_db.execute.side_effect = [make_result(scalar=mock_client)]

        client = await service.update(mock_db, 1, ClientUpdate(address="Route de Blida"))

        assert client.address == "Route de Blida"
        assert client.code == "CL001"

    @pytest.mark.asyncio
    async def test_update_duplicate_code(self, service, mock_db, make_result, mock_client):
        """Test nuovo codice già in uso."""
        other = type(mock_client)(id=2, code="CL002")
        mock_db.execute.side_effect = [make_result(scalar=mock_client), make_result(scalar=other)]

        with pytest.raises(DuplicateError):
            await service.update(mock_db, 1, ClientUpdate(code="CL002"))

    @pytest.mark.asyncio
    async def test_soft_delete(self, service, mock_db, make_result, mock_client):
        """Test soft delete."""
        mock_db.execute.return_value = make_result(scalar=mock_client)

        await service.delete(mock_db, 1)

        assert mock_client.is_active is False
        mock_db.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_all(self, service, mock_db, make_result, mock_client, compile_pg):
        """Test lista clienti attivi ordinata per nome."""
        mock_db.execute.return_value = make_result(scalars=[mock_client])

        clients = await service.get_all(mock_db)

        assert clients == [mock_client]
        sql = compile_pg(mock_db.execute.call_args.args[0])
        assert "ORDER BY clients.name ASC" in sql
        assert "clients.is_active" in sql
