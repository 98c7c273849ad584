"""JWT-bearer grant: exchange a signed assertion for an access token."""

import logging

import httpx
from pydantic import ValidationError

from zcred.core.blocking import run_blocking
from zcred.core.errors import AuthenticationFailedError, MalformedResponseError
from zcred.core.settings import CredentialSettings
from zcred.oauth.types import TokenResponse

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"

logger = logging.getLogger(__name__)


class TokenExchangeClient:
    """Posts signed assertions to a token endpoint.

    One request per call and no retries; retry and backoff belong to the
    caller. An injected ``http_client`` is used as-is and never closed here.
    """

    def __init__(
        self,
        settings: CredentialSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or CredentialSettings()
        self._http_client = http_client

    def build_form(self, signed_assertion: str, scope: str | None = None) -> dict[str, str]:
        """Form fields of the JWT-bearer token request."""
        return {
            "grant_type": JWT_BEARER_GRANT_TYPE,
            "assertion": signed_assertion,
            "scope": scope or self._settings.default_scope,
        }

    async def _post(self, endpoint_url: str, form: dict[str, str]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(endpoint_url, data=form)
        async with httpx.AsyncClient(timeout=self._settings.http_timeout) as client:
            return await client.post(endpoint_url, data=form)

    async def request_token(
        self, signed_assertion: str, endpoint_url: str, scope: str | None = None
    ) -> TokenResponse:
        """Exchange the assertion and return the full token response.

        Raises:
            AuthenticationFailedError: On a non-success HTTP status.
            MalformedResponseError: If the body has no ``access_token``.
        """
        form = self.build_form(signed_assertion, scope)
        logger.info("Requesting access token from %s (scope=%s)", endpoint_url, form["scope"])
        response = await self._post(endpoint_url, form)

        if not response.is_success:
            logger.warning(
                "Token exchange at %s rejected with HTTP %d",
                endpoint_url,
                response.status_code,
            )
            raise AuthenticationFailedError(response.status_code, response.text)
        try:
            token = TokenResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Token response from {endpoint_url} is not json with a non-empty access_token."
            ) from exc
        logger.info("Access token issued by %s", endpoint_url)
        return token

    async def exchange(
        self, signed_assertion: str, endpoint_url: str, scope: str | None = None
    ) -> str:
        """Exchange the assertion for an access token string."""
        token = await self.request_token(signed_assertion, endpoint_url, scope)
        return token.access_token

    def exchange_sync(
        self, signed_assertion: str, endpoint_url: str, scope: str | None = None
    ) -> str:
        """Blocking variant of :meth:`exchange`."""
        return run_blocking(lambda: self.exchange(signed_assertion, endpoint_url, scope))
