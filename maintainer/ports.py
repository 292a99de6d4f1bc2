from typing import Protocol


class RemoteAuthority(Protocol):
    """Source of truth for refs and tags, e.g. the GitHub API."""

    def resolve_ref(self, owner: str, repo: str, ref: str) -> str: ...

    def get_tags_for_repo(self, owner: str, repo: str) -> dict[str, str]: ...
