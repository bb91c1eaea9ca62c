"""Tests for authorization-code exchange."""

import httpx
import pytest

from factories import FakeIdp
from tokenbridge.core.errors import FetchError
from tokenbridge.core.settings import IdpSettings
from tokenbridge.idp.exchange import CodeExchangeClient


@pytest.fixture
def exchange(http_client: httpx.AsyncClient) -> CodeExchangeClient:
    return CodeExchangeClient(http_client, IdpSettings())


class TestExchange:
    """Tests for CodeExchangeClient.exchange."""

    async def test_posts_code_and_credentials(
        self, exchange: CodeExchangeClient, fake_idp: FakeIdp
    ) -> None:
        pair = await exchange.exchange("the-code")
        assert pair.id_token == "id.tok.en"
        assert pair.access_token == "acc"
        sent = fake_idp.token_requests[0]
        assert sent["code"] == "the-code"
        assert sent["grant_type"] == "authorization_code"
        assert sent["client_id"] == "client-1"
        assert sent["client_secret"] == "s3cret"
        assert sent["redirect_uri"] == "https://app.example.com/cb"

    async def test_rejected_code(
        self, exchange: CodeExchangeClient, fake_idp: FakeIdp
    ) -> None:
        fake_idp.token_status = 400
        fake_idp.token_response = {"error": "invalid_grant"}
        with pytest.raises(FetchError):
            await exchange.exchange("used-code")

    async def test_missing_id_token(
        self, exchange: CodeExchangeClient, fake_idp: FakeIdp
    ) -> None:
        fake_idp.token_response = {"access_token": "acc"}
        with pytest.raises(FetchError):
            await exchange.exchange("code")
