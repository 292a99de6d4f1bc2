"""GitHub REST API client implementing the remote authority port."""

import logging

import httpx

from .errors import ResolutionError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


class GitHubClient:
    """Resolves refs and lists tags through the GitHub API."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str = GITHUB_API_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize GitHub client.

        Args:
            token: Personal access token; anonymous requests if omitted
            base_url: API root, override for GitHub Enterprise
            timeout: Request timeout in seconds
            transport: Custom httpx transport, used by tests
        """
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def resolve_ref(self, owner: str, repo: str, ref: str) -> str:
        """Resolve a tag, branch or commit SHA to a commit SHA.

        Raises:
            ResolutionError: If the ref is neither a tag, a branch nor a commit
        """
        for kind in ("tags", "heads"):
            data = self._get_json(f"/repos/{owner}/{repo}/git/ref/{kind}/{ref}")
            target = (data or {}).get("object") or {}
            if not target.get("sha"):
                continue
            if target.get("type") == "tag":
                # Annotated tag, peel to the commit it points at
                tag = self._get_json(f"/repos/{owner}/{repo}/git/tags/{target['sha']}")
                if tag and tag.get("object", {}).get("sha"):
                    return tag["object"]["sha"]
            return target["sha"]

        data = self._get_json(f"/repos/{owner}/{repo}/commits/{ref}")
        if data and data.get("sha"):
            return data["sha"]

        raise ResolutionError(f"Could not resolve reference {ref} in {owner}/{repo}")

    def get_tags_for_repo(self, owner: str, repo: str) -> dict[str, str]:
        """List all tags of a repository mapped to their commit SHAs.

        Raises:
            ResolutionError: If a page of tags cannot be fetched
        """
        tags: dict[str, str] = {}
        url: str | None = f"/repos/{owner}/{repo}/tags"
        params: dict | None = {"per_page": 100}

        while url:
            try:
                response = self._client.get(url, params=params)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise ResolutionError(f"Failed to list tags for {owner}/{repo}: {e}") from e

            for tag in response.json():
                sha = (tag.get("commit") or {}).get("sha")
                if tag.get("name") and sha:
                    tags[tag["name"]] = sha

            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            params = None

        logger.debug("Listed %d tags for %s/%s", len(tags), owner, repo)
        return tags

    def _get_json(self, url: str) -> dict | None:
        """GET a JSON object, None when the resource does not exist."""
        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            raise ResolutionError(f"Network error fetching {url}: {e}") from e

        if response.status_code in (404, 422):
            return None

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ResolutionError(f"HTTP error fetching {url}: {e}") from e

        data = response.json()
        # A ref prefix match returns a list, which is not an exact hit
        return data if isinstance(data, dict) else None
