"""Application credentials.

An application is an OIDC client (for example the API behind a single page
application) that proves its identity with a self-contained signed JWT.
"""

from typing import ClassVar

from zcred.credentials.record import CredentialRecord


class Application(CredentialRecord):
    """Application key file: client id, app id, key id and private key."""

    TYPE: ClassVar[str] = "application"

    client_id: str
    app_id: str

    @property
    def subject_id(self) -> str:
        return self.client_id
