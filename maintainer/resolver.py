"""Resolution of version aliases to commit SHAs.

Different references to one action (``v4``, ``v4.2.1``, a commit SHA) can
point at the same commit. Comparing the commits instead of the strings lets
the analyzer avoid flagging a reference that is already current.

Every public comparison degrades to plain string comparison when the remote
authority is unavailable, so an API outage never breaks an audit. Results
are cached for ``cache_ttl`` seconds. The first successful resolution for a
repository also caches its whole tag set, after which lookups for sibling
versions need no further remote calls.
"""

import logging
from collections.abc import Iterable, Mapping

from .cache import DEFAULT_CACHE_TTL, CacheEntry, TTLCache
from .detect import is_branch
from .errors import InvalidRepositoryError, MaintainerError, ResolutionError
from .models import DependencyReference, ResolvedReference
from .ports import RemoteAuthority

logger = logging.getLogger(__name__)


def split_repository(repository: str) -> tuple[str, str]:
    """Split an ``owner/repo`` identifier.

    Raises:
        InvalidRepositoryError: If the identifier is not exactly owner/repo
    """
    parts = repository.split("/")
    if len(parts) != 2 or not all(parts):
        raise InvalidRepositoryError(f"Invalid repository format: {repository}")
    return parts[0], parts[1]


class VersionResolver:
    """Resolver for action version references."""

    def __init__(
        self,
        client: RemoteAuthority,
        skip_resolution: bool = False,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        cache: TTLCache | None = None,
    ):
        """Initialize version resolver.

        Args:
            client: Remote authority used to resolve refs and list tags
            skip_resolution: Compare version strings only, never call the client
            cache_ttl: Seconds before a cached result must be re-validated
            cache: Pre-built cache, mainly for injecting a test clock
        """
        self.client = client
        self.skip_resolution = skip_resolution
        self._cache = cache if cache is not None else TTLCache(ttl=cache_ttl)

    def resolve_ref(self, owner: str, repo: str, ref: str) -> str:
        """Resolve a tag, branch or commit to a commit SHA.

        Args:
            owner: Repository owner
            repo: Repository name
            ref: Reference to resolve

        Returns:
            Commit SHA

        Raises:
            ResolutionError: If the remote authority cannot resolve the ref,
                or resolution is skipped
        """
        if self.skip_resolution:
            raise ResolutionError(f"Resolution skipped for {owner}/{repo}@{ref}")

        key = f"{owner}/{repo}:{ref}"
        entry = self._cache.get(key)
        if entry is not None:
            return entry.sha

        info = self.get_cached_version_info(owner, repo)
        if info is not None and ref in info[0]:
            return info[0][ref]

        try:
            sha = self.client.resolve_ref(owner, repo, ref)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(f"Failed to resolve {owner}/{repo}@{ref}: {e}") from e
        if not sha:
            raise ResolutionError(f"Could not resolve reference {ref} in {owner}/{repo}")

        self._cache.set(key, CacheEntry.for_sha(sha, self._cache.now()))
        logger.debug("Resolved %s/%s@%s to %s", owner, repo, ref, sha)

        self.ensure_comprehensive_cache(owner, repo)
        return sha

    def get_tags(self, owner: str, repo: str) -> Mapping[str, str]:
        """Get all tags of a repository mapped to commit SHAs, with caching.

        Raises:
            ResolutionError: If the tags cannot be listed, or resolution is skipped
        """
        return self._get_tags_entry(owner, repo).tags

    def _get_tags_entry(self, owner: str, repo: str) -> CacheEntry:
        if self.skip_resolution:
            raise ResolutionError(f"Resolution skipped for {owner}/{repo} tags")

        key = f"{owner}/{repo}:tags"
        entry = self._cache.get(key)
        if entry is not None:
            return entry

        try:
            tags = self.client.get_tags_for_repo(owner, repo)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(f"Failed to list tags for {owner}/{repo}: {e}") from e

        entry = CacheEntry.for_tags(tags or {}, self._cache.now())
        self._cache.set(key, entry)
        return entry

    def get_cached_version_info(
        self, owner: str, repo: str
    ) -> tuple[Mapping[str, str], Mapping[str, tuple[str, ...]]] | None:
        """Return cached version->SHA and SHA->aliases maps if fresh."""
        entry = self._cache.get(f"{owner}/{repo}:comprehensive")
        if entry is None:
            return None
        return entry.versions, entry.aliases

    def ensure_comprehensive_cache(self, owner: str, repo: str) -> bool:
        """Cache the complete tag set of a repository.

        Returns:
            True if a fresh comprehensive entry is available afterwards
        """
        if self.get_cached_version_info(owner, repo) is not None:
            return True

        try:
            tags_entry = self._get_tags_entry(owner, repo)
        except ResolutionError as e:
            logger.debug("Skipping comprehensive cache for %s/%s: %s", owner, repo, e)
            return False

        tags = tags_entry.tags
        aliases: dict[str, list[str]] = {}
        for tag, sha in tags.items():
            aliases.setdefault(sha, []).append(tag)

        # Expires together with the tag listing it was built from
        self._cache.set(
            f"{owner}/{repo}:comprehensive",
            CacheEntry.comprehensive(tags, aliases, tags_entry.timestamp),
        )
        logger.debug("Cached %d versions for %s/%s", len(tags), owner, repo)
        return True

    def find_aliases(self, owner: str, repo: str, sha: str, exclude_version: str = "") -> list[str]:
        """Find other tags pointing at the same commit.

        Raises:
            ResolutionError: If the tags cannot be listed
        """
        info = self.get_cached_version_info(owner, repo)
        if info is not None:
            candidates = info[1].get(sha, ())
        else:
            candidates = [tag for tag, tag_sha in self.get_tags(owner, repo).items() if tag_sha == sha]
        return sorted(tag for tag in candidates if tag != exclude_version)

    def are_versions_equivalent(self, repository: str, version1: str, version2: str) -> bool:
        """Check whether two versions resolve to the same commit.

        Falls back to string comparison when resolution is skipped, the
        repository identifier is malformed or either version fails to
        resolve.
        """
        if self.skip_resolution or version1 == version2:
            return version1 == version2

        try:
            owner, repo = split_repository(repository)
        except InvalidRepositoryError as e:
            logger.debug("%s, comparing versions as strings", e)
            return False

        info = self.get_cached_version_info(owner, repo)
        if info is not None:
            versions = info[0]
            if version1 in versions and version2 in versions:
                return versions[version1] == versions[version2]

        try:
            sha1 = self.resolve_ref(owner, repo, version1)
            sha2 = self.resolve_ref(owner, repo, version2)
        except ResolutionError as e:
            logger.debug("Resolution failed for %s, comparing versions as strings: %s", repository, e)
            return False

        return sha1 == sha2

    def is_version_outdated(self, repository: str, current_version: str, latest_version: str) -> bool:
        """Check whether ``current_version`` is behind ``latest_version``.

        Branch references are never outdated.
        """
        if current_version == latest_version or is_branch(current_version):
            return False
        if self.skip_resolution:
            return True
        return not self.are_versions_equivalent(repository, current_version, latest_version)

    def resolve_references(self, references: Iterable[DependencyReference]) -> list[ResolvedReference]:
        """Resolve each reference to its commit and the tags aliasing it.

        A reference that cannot be resolved is returned without a SHA.
        """
        resolved = []
        for reference in references:
            if self.skip_resolution:
                resolved.append(ResolvedReference(reference=reference))
                continue
            try:
                resolved.append(self._resolve_reference(reference))
            except MaintainerError as e:
                logger.debug("Leaving %s@%s unresolved: %s", reference.repository, reference.version, e)
                resolved.append(ResolvedReference(reference=reference))
        return resolved

    def _resolve_reference(self, reference: DependencyReference) -> ResolvedReference:
        owner, repo = split_repository(reference.repository)
        sha = self.resolve_ref(owner, repo, reference.version)
        self.ensure_comprehensive_cache(owner, repo)

        try:
            aliases = self.find_aliases(owner, repo, sha, reference.version)
        except ResolutionError:
            aliases = []

        return ResolvedReference(reference=reference, resolved_sha=sha, aliases=aliases)
