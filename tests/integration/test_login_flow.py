"""Integration test: IdP redirect, code exchange, key rotation, custom token."""

from urllib.parse import parse_qs, urlparse

import jwt
from httpx import AsyncClient

from factories import FakeIdp, IssuerKeypair, id_token_claims, make_idp_key
from tokenbridge.core.settings import FIREBASE_AUDIENCE
from tokenbridge.idp.key_store import SqlKeyStore

HTTP_OK = 200
HTTP_REDIRECT = 302
HTTP_BAD_REQUEST = 400


async def _login(client: AsyncClient, fake_idp: FakeIdp, id_token: str) -> str:
    """Drive the redirect and callback legs; return the id_token handed back."""
    resp = await client.get("/auth/login")
    assert resp.status_code == HTTP_REDIRECT

    fake_idp.token_response = {"id_token": id_token, "access_token": "acc"}
    resp = await client.post("/auth/callback", data={"code": "code-1"})
    assert resp.status_code == HTTP_REDIRECT
    query = parse_qs(urlparse(resp.headers["location"]).query)
    return query["id_token"][0]


class TestLoginFlow:
    """Full flow against a fake IdP."""

    async def test_login_then_rotation(
        self,
        client: AsyncClient,
        fake_idp: FakeIdp,
        key_store: SqlKeyStore,
        issuer_keypair: IssuerKeypair,
        monkeypatch,
    ) -> None:
        monkeypatch.setenv("TOKENBRIDGE_INTERNAL_TOKEN", "cron")
        fake_idp.keys = [make_idp_key("k1")]
        refresh = await client.post(
            "/internal/keys/refresh", headers={"Authorization": "Bearer cron"}
        )
        assert refresh.status_code == HTTP_OK

        id_token = await _login(
            client, fake_idp, make_idp_key("k1").sign(id_token_claims())
        )
        resp = await client.get("/auth/custom-token", params={"id_token": id_token})
        assert resp.status_code == HTTP_OK
        claims = jwt.decode(
            resp.json()["customToken"],
            issuer_keypair.public_key_pem,
            algorithms=["RS256"],
            audience=FIREBASE_AUDIENCE,
        )
        assert claims["uid"] == "alice@example.com"
        assert fake_idp.jwks_calls == 1

        # IdP rotates to k2 and retires k1; a k2 token triggers one refill
        fake_idp.keys = [make_idp_key("k2")]
        id_token = await _login(
            client,
            fake_idp,
            make_idp_key("k2").sign(id_token_claims(upn="bob@example.com")),
        )
        resp = await client.post("/auth/custom-token", json={"id_token": id_token})
        assert resp.status_code == HTTP_OK
        assert fake_idp.jwks_calls == 2

        refresh = await client.post(
            "/internal/keys/refresh", headers={"Authorization": "Bearer cron"}
        )
        assert refresh.json()["evicted"] == ["k1"]
        assert [k.kid for k in await key_store.get_all()] == ["k2"]

        stale = make_idp_key("k1").sign(id_token_claims())
        resp = await client.post("/auth/custom-token", json={"id_token": stale})
        assert resp.status_code == HTTP_BAD_REQUEST
