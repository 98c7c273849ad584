"""Shared test fixtures for zcred."""

import json

import pytest

from zcred.crypto.keys import generate_rsa_keypair
from zcred.crypto.types import SigningKeyData

USER_ID = "170079991923474689"
CLIENT_ID = "170088295403946241@zitadel_test"
APP_ID = "170088295403881705"
ISSUER = "https://zitadel.example.com"


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment from leaking into settings."""
    monkeypatch.delenv("ZCRED_HTTP_TIMEOUT", raising=False)
    monkeypatch.delenv("ZCRED_DEFAULT_SCOPE", raising=False)


@pytest.fixture(scope="session")
def keypair() -> SigningKeyData:
    """One RSA keypair for the whole test session."""
    return generate_rsa_keypair()


@pytest.fixture
def service_account_json(keypair: SigningKeyData) -> str:
    """A service account key file as issued by the identity platform."""
    return json.dumps(
        {
            "type": "serviceaccount",
            "keyId": keypair.kid,
            "key": keypair.private_key_pem,
            "userId": USER_ID,
        }
    )


@pytest.fixture
def application_json(keypair: SigningKeyData) -> str:
    """An application key file as issued by the identity platform."""
    return json.dumps(
        {
            "type": "application",
            "keyId": keypair.kid,
            "key": keypair.private_key_pem,
            "appId": APP_ID,
            "clientId": CLIENT_ID,
        }
    )
