"""Library settings loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

HTTP_TIMEOUT_DEFAULT = 10.0
ZITADEL_API_SCOPE = "urn:zitadel:iam:org:project:id:zitadel:aud"
DEFAULT_SCOPE = f"openid {ZITADEL_API_SCOPE}"


class CredentialSettings(BaseSettings):
    """Token endpoint settings."""

    model_config = SettingsConfigDict(env_prefix="ZCRED_")

    http_timeout: float = Field(default=HTTP_TIMEOUT_DEFAULT, gt=0)
    default_scope: str = DEFAULT_SCOPE
