from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class RepositoryRegistry(BaseModel):
    """
    Read-only mapping of repository name to the deploy script that ships it.

    Built once at startup and shared by every request; neither the model nor
    the mapping it holds can be changed afterwards.
    """
    model_config = ConfigDict(frozen=True)

    scripts: Mapping[str, str]

    @field_validator("scripts")
    @classmethod
    def freeze_scripts(cls, value):
        return MappingProxyType(dict(value))

    def lookup(self, repo_name: str) -> Optional[str]:
        return self.scripts.get(repo_name)

    def __contains__(self, repo_name) -> bool:
        return repo_name in self.scripts

    def __len__(self) -> int:
        return len(self.scripts)
