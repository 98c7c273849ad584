"""Service account credentials and the JWT-bearer authentication flow."""

import logging
from typing import ClassVar

import httpx
from pydantic import BaseModel

from zcred.core.blocking import run_blocking
from zcred.core.settings import ZITADEL_API_SCOPE, CredentialSettings
from zcred.credentials.record import CredentialRecord
from zcred.oauth.discovery import discover_token_endpoint
from zcred.oauth.token_exchange import TokenExchangeClient

PROJECT_AUDIENCE_SCOPE = "urn:zitadel:iam:org:project:id:{project_id}:aud"

logger = logging.getLogger(__name__)


class AuthOptions(BaseModel):
    """Scopes requested when a service account authenticates."""

    project_audiences: list[str] = []
    api_access: bool = True
    additional_scopes: list[str] = []

    def scope(self) -> str:
        """Space-separated scope, ``openid`` first, duplicates dropped."""
        scopes = ["openid"]
        scopes.extend(
            PROJECT_AUDIENCE_SCOPE.format(project_id=aud)
            for aud in self.project_audiences
        )
        if self.api_access:
            scopes.append(ZITADEL_API_SCOPE)
        scopes.extend(self.additional_scopes)
        return " ".join(dict.fromkeys(scopes))


class ServiceAccount(CredentialRecord):
    """Service account key file: user id, key id and private key."""

    TYPE: ClassVar[str] = "serviceaccount"

    user_id: str

    @property
    def subject_id(self) -> str:
        return self.user_id

    async def authenticate(
        self,
        audience: str,
        options: AuthOptions | None = None,
        http_client: httpx.AsyncClient | None = None,
        settings: CredentialSettings | None = None,
    ) -> str:
        """Fetch an access token from the issuer at ``audience``.

        The token endpoint is discovered from the issuer, a fresh assertion
        is signed for it and exchanged with the JWT-bearer grant. Without
        ``options`` the scope of a default :class:`AuthOptions` is requested.
        """
        settings = settings or CredentialSettings()
        endpoint = await discover_token_endpoint(audience, http_client, settings)
        assertion = await self.aget_signed_jwt(audience)
        if options is None:
            options = AuthOptions()
        client = TokenExchangeClient(settings=settings, http_client=http_client)
        logger.info("Authenticating service account %s at %s", self.user_id, audience)
        return await client.exchange(assertion, endpoint, options.scope())

    def authenticate_sync(
        self,
        audience: str,
        options: AuthOptions | None = None,
        settings: CredentialSettings | None = None,
    ) -> str:
        """Blocking variant of :meth:`authenticate`."""
        return run_blocking(
            lambda: self.authenticate(audience, options, settings=settings)
        )
