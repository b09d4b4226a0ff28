"""Pydantic model for the Google service account credential."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


class ServiceAccount(BaseModel):
    """Fields of a service account JSON key used by the dispatcher."""

    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)

    client_email: str = Field(..., min_length=1)
    private_key: str = Field(..., min_length=1)
    private_key_id: str | None = None
    project_id: str | None = None
    token_uri: str = DEFAULT_TOKEN_URI
    type: str = "service_account"
