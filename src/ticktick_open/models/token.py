"""OAuth2 access token returned by the authorization flow."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AccessToken(BaseModel):
    """
    Bearer token for the Open API.

    Produced once by ``AwaitingAuthCode.finish_auth`` and passed to the
    ``TickTick`` client. Refresh tokens are not issued by the service.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    value: str = Field(alias="access_token", repr=False)
    token_type: str = "bearer"
    expires_in: int = 0
    scope: str = ""

    @property
    def scopes(self) -> list[str]:
        return self.scope.split()
