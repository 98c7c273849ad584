"""Type definitions for token endpoint and discovery responses."""

from pydantic import BaseModel, ConfigDict, Field, JsonValue


class TokenResponse(BaseModel):
    """OAuth token endpoint response.

    Only ``access_token`` is validated; the other fields are informational
    and kept as sent.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str = Field(min_length=1)
    token_type: JsonValue = None
    expires_in: JsonValue = None
    id_token: JsonValue = None
    scope: JsonValue = None


class DiscoveryDocument(BaseModel):
    """Subset of an OIDC .well-known/openid-configuration document."""

    model_config = ConfigDict(extra="allow")

    issuer: str
    token_endpoint: str = Field(min_length=1)
    jwks_uri: str | None = None
    grant_types_supported: list[str] = []
    token_endpoint_auth_methods_supported: list[str] = []
