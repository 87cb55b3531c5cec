"""Per-provider credentials held by the registry for one invocation."""

from pydantic import BaseModel, Field


class TokenCredential(BaseModel):
    """Personal access token (GitHub, GitLab)."""

    token: str = Field(..., min_length=1, repr=False)


class BasicCredential(BaseModel):
    """Username and app password (Bitbucket)."""

    username: str = Field(..., min_length=1)
    secret: str = Field(..., min_length=1, repr=False)


ProviderCredential = TokenCredential | BasicCredential
