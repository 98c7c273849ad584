"""Tests for service account credentials and authentication."""

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from zcred.core.errors import AuthenticationFailedError
from zcred.core.settings import DEFAULT_SCOPE
from zcred.credentials.service_account import AuthOptions, ServiceAccount
from zcred.crypto.assertion import decode_assertion
from zcred.crypto.types import SigningKeyData
from zcred.oauth.token_exchange import JWT_BEARER_GRANT_TYPE

ISSUER = "https://zitadel.example.com"
TOKEN_ENDPOINT = f"{ISSUER}/oauth/v2/token"


@pytest.fixture
def sa(service_account_json: str) -> ServiceAccount:
    """Load the test service account."""
    return ServiceAccount.load_from_json_string(service_account_json)


def _platform(
    keypair: SigningKeyData, seen: list[dict[str, list[str]]], status_code: int = 200
) -> httpx.MockTransport:
    """Fake identity platform serving discovery and the token endpoint."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/.well-known/openid-configuration":
            return httpx.Response(
                200, json={"issuer": ISSUER, "token_endpoint": TOKEN_ENDPOINT}
            )
        form = parse_qs(request.content.decode())
        seen.append(form)
        decode_assertion(form["assertion"][0], keypair.public_key_pem, ISSUER)
        if status_code != 200:
            return httpx.Response(status_code, text="invalid_grant")
        return httpx.Response(
            200,
            json={"access_token": "sa-token", "token_type": "Bearer", "expires_in": 43199},
        )

    return httpx.MockTransport(handler)


class TestServiceAccountRecord:
    """Tests for the service account record shape."""

    def test_load_user_id(self, sa: ServiceAccount) -> None:
        assert sa.user_id == "170079991923474689"
        assert sa.TYPE == "serviceaccount"

    def test_signed_jwt_subject(self, sa: ServiceAccount, keypair: SigningKeyData) -> None:
        claims = decode_assertion(sa.get_signed_jwt(ISSUER), keypair.public_key_pem, ISSUER)
        assert claims.iss == claims.sub == "170079991923474689"

    async def test_concurrent_signing(
        self, sa: ServiceAccount, keypair: SigningKeyData
    ) -> None:
        tokens = await asyncio.gather(*(sa.aget_signed_jwt(ISSUER) for _ in range(5)))
        for token in tokens:
            assert decode_assertion(token, keypair.public_key_pem, ISSUER).aud == ISSUER


class TestAuthOptions:
    """Tests for scope building."""

    def test_default_includes_api_access(self) -> None:
        assert AuthOptions().scope() == DEFAULT_SCOPE

    def test_openid_only(self) -> None:
        assert AuthOptions(api_access=False).scope() == "openid"

    def test_full_scope(self) -> None:
        options = AuthOptions(
            project_audiences=["111", "222"],
            api_access=True,
            additional_scopes=["profile", "openid"],
        )
        assert options.scope() == (
            "openid "
            "urn:zitadel:iam:org:project:id:111:aud "
            "urn:zitadel:iam:org:project:id:222:aud "
            "urn:zitadel:iam:org:project:id:zitadel:aud "
            "profile"
        )


class TestAuthenticate:
    """Tests for the discovery + JWT-bearer flow."""

    async def test_returns_access_token(
        self, sa: ServiceAccount, keypair: SigningKeyData
    ) -> None:
        seen: list[dict[str, list[str]]] = []
        async with httpx.AsyncClient(transport=_platform(keypair, seen)) as client:
            token = await sa.authenticate(ISSUER, http_client=client)
        assert token == "sa-token"
        assert seen[0]["grant_type"] == [JWT_BEARER_GRANT_TYPE]
        assert seen[0]["scope"] == [DEFAULT_SCOPE]

    async def test_uses_option_scope(
        self, sa: ServiceAccount, keypair: SigningKeyData
    ) -> None:
        seen: list[dict[str, list[str]]] = []
        options = AuthOptions(project_audiences=["999"])
        async with httpx.AsyncClient(transport=_platform(keypair, seen)) as client:
            await sa.authenticate(ISSUER, options, http_client=client)
        assert seen[0]["scope"] == [
            "openid "
            "urn:zitadel:iam:org:project:id:999:aud "
            "urn:zitadel:iam:org:project:id:zitadel:aud"
        ]

    async def test_no_options_same_as_default_options(
        self, sa: ServiceAccount, keypair: SigningKeyData
    ) -> None:
        seen: list[dict[str, list[str]]] = []
        async with httpx.AsyncClient(transport=_platform(keypair, seen)) as client:
            await sa.authenticate(ISSUER, http_client=client)
            await sa.authenticate(ISSUER, AuthOptions(), http_client=client)
        assert seen[0]["scope"] == seen[1]["scope"] == [DEFAULT_SCOPE]

    async def test_rejected(self, sa: ServiceAccount, keypair: SigningKeyData) -> None:
        seen: list[dict[str, list[str]]] = []
        transport = _platform(keypair, seen, status_code=401)
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(AuthenticationFailedError) as exc_info:
                await sa.authenticate(ISSUER, http_client=client)
        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "invalid_grant"
