"""OpenID Connect discovery of an issuer's token endpoint."""

import logging

import httpx
from pydantic import ValidationError

from zcred.core.errors import AuthenticationFailedError, MalformedResponseError
from zcred.core.settings import CredentialSettings
from zcred.oauth.types import DiscoveryDocument

WELL_KNOWN_PATH = "/.well-known/openid-configuration"

logger = logging.getLogger(__name__)


def discovery_url(issuer: str) -> str:
    """Build the discovery document URL for ``issuer``."""
    return f"{issuer.rstrip('/')}{WELL_KNOWN_PATH}"


async def fetch_discovery(
    issuer: str,
    http_client: httpx.AsyncClient | None = None,
    settings: CredentialSettings | None = None,
) -> DiscoveryDocument:
    """GET and parse the discovery document of ``issuer``."""
    settings = settings or CredentialSettings()
    url = discovery_url(issuer)
    if http_client is None:
        async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
            response = await client.get(url)
    else:
        response = await http_client.get(url)

    if not response.is_success:
        logger.warning("Discovery at %s failed with HTTP %d", url, response.status_code)
        raise AuthenticationFailedError(response.status_code, response.text)
    try:
        return DiscoveryDocument.model_validate_json(response.content)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Discovery document at {url} is malformed: {exc}"
        ) from exc


async def discover_token_endpoint(
    issuer: str,
    http_client: httpx.AsyncClient | None = None,
    settings: CredentialSettings | None = None,
) -> str:
    """Return the token endpoint advertised by ``issuer``."""
    document = await fetch_discovery(issuer, http_client, settings)
    logger.debug("Discovered token endpoint %s", document.token_endpoint)
    return document.token_endpoint
