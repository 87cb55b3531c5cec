"""Provider, owner and repository name resolved from a remote URL."""

from pydantic import BaseModel

from gkcli.models.provider import ProviderName


class RepoLocator(BaseModel):
    """Where a repository lives. GitLab owners may contain '/'."""

    provider: ProviderName
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"
