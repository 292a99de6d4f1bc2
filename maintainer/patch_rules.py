"""Default field transformations for common GitHub actions."""

from .models import (
    OPERATION_ADD,
    OPERATION_REMOVE,
    OPERATION_RENAME,
    FieldPatch,
    PatchRule,
    VersionPatch,
)


def _add(field: str, value, reason: str) -> FieldPatch:
    return FieldPatch(operation=OPERATION_ADD, field=field, value=value, reason=reason)


def _remove(field: str, reason: str) -> FieldPatch:
    return FieldPatch(operation=OPERATION_REMOVE, field=field, reason=reason)


def _rename(field: str, new_field: str, reason: str) -> FieldPatch:
    return FieldPatch(operation=OPERATION_RENAME, field=field, new_field=new_field, reason=reason)


def _checkout() -> PatchRule:
    return PatchRule(
        repository="actions/checkout",
        version_patches=(
            VersionPatch(
                from_version="v1",
                to_version="v4",
                description="Major upgrade from v1 to v4 with token handling and fetch behavior changes",
                patches=(
                    _remove(
                        "token",
                        "v4 uses GITHUB_TOKEN automatically, so the token input is no longer required",
                    ),
                    _add(
                        "fetch-depth",
                        1,
                        "v4 defaults to a shallow clone; set explicitly if full history is needed",
                    ),
                ),
            ),
            VersionPatch(
                from_version="v2",
                to_version="v4",
                description="Upgrade from v2 to v4 with improved defaults and new capabilities",
                patches=(
                    _add("fetch-tags", False, "v4 adds fetch-tags to control tag fetching"),
                ),
            ),
            VersionPatch(
                from_version="v3",
                to_version="v4",
                description="Minor upgrade from v3 to v4 with performance improvements",
                patches=(
                    _add("show-progress", True, "v4 adds show-progress for large repositories"),
                ),
            ),
        ),
    )


def _setup_node() -> PatchRule:
    renamed = "'version' was renamed to 'node-version'"
    return PatchRule(
        repository="actions/setup-node",
        version_patches=(
            VersionPatch(
                from_version="v1",
                to_version="v4",
                description="Major upgrade from v1 to v4 with parameter name changes and caching",
                patches=(
                    _rename("version", "node-version", renamed),
                    _add("cache", "npm", "v4 has built-in dependency caching; npm is the common default"),
                ),
            ),
            VersionPatch(
                from_version="v2",
                to_version="v4",
                description="Upgrade from v2 to v4 with improved caching and registry support",
                patches=(
                    _rename("version", "node-version", renamed),
                    _add("cache", "npm", "v4 caches dependencies for faster builds"),
                ),
            ),
            VersionPatch(
                from_version="v3",
                to_version="v4",
                description="Minor upgrade from v3 to v4",
                patches=(
                    _add("check-latest", False, "v4 adds check-latest to control version lookups"),
                ),
            ),
        ),
    )


def _setup_python() -> PatchRule:
    return PatchRule(
        repository="actions/setup-python",
        version_patches=(
            VersionPatch(
                from_version="v1",
                to_version="v5",
                description="Major upgrade from v1 to v5 with version handling and caching",
                patches=(
                    _add("cache", "pip", "v5 supports dependency caching; pip is the standard manager"),
                    _add("check-latest", False, "v5 adds check-latest for reproducible builds"),
                ),
            ),
            VersionPatch(
                from_version="v2",
                to_version="v5",
                description="Upgrade from v2 to v5 with caching and architecture improvements",
                patches=(_add("cache", "pip", "Built-in dependency caching speeds up builds"),),
            ),
            VersionPatch(
                from_version="v3",
                to_version="v5",
                description="Upgrade from v3 to v5 with enhanced caching options",
                patches=(
                    _add(
                        "cache-dependency-path",
                        "requirements.txt",
                        "v5 accepts a dependency file path for cache invalidation",
                    ),
                ),
            ),
            VersionPatch(
                from_version="v4",
                to_version="v5",
                description="Minor upgrade from v4 to v5",
                patches=(
                    _add("allow-prereleases", False, "v5 adds allow-prereleases for version selection"),
                ),
            ),
        ),
    )


def _upload_artifact() -> PatchRule:
    return PatchRule(
        repository="actions/upload-artifact",
        version_patches=(
            VersionPatch(
                from_version="v1",
                to_version="v4",
                description="Major breaking change from v1 to v4 with the new artifact API",
                patches=(
                    _add("compression-level", 6, "v4 adds compression-level to trade size for speed"),
                    _add("overwrite", False, "v4 requires an explicit overwrite setting"),
                ),
            ),
            VersionPatch(
                from_version="v2",
                to_version="v4",
                description="Breaking upgrade from v2 to v4",
                patches=(
                    _add("compression-level", 6, "Configurable compression for uploads"),
                    _add("retention-days", 90, "v4 allows explicit retention control"),
                ),
            ),
            VersionPatch(
                from_version="v3",
                to_version="v4",
                description="Breaking upgrade from v3 to v4 with the new artifact backend",
                patches=(
                    _remove("path-separator", "v4 handles paths automatically"),
                    _add("include-hidden-files", False, "v4 excludes hidden files unless asked"),
                ),
            ),
        ),
    )


def _download_artifact() -> PatchRule:
    return PatchRule(
        repository="actions/download-artifact",
        version_patches=(
            VersionPatch(
                from_version="v1",
                to_version="v4",
                description="Major upgrade from v1 to v4 with the new download API",
                patches=(
                    _add("github-token", "${{ github.token }}", "v4 may need an explicit token"),
                ),
            ),
            VersionPatch(
                from_version="v2",
                to_version="v4",
                description="Breaking upgrade from v2 to v4",
                patches=(
                    _add("merge-multiple", False, "v4 adds merge-multiple for same-named artifacts"),
                ),
            ),
            VersionPatch(
                from_version="v3",
                to_version="v4",
                description="Breaking upgrade from v3 to v4 with the new artifact backend",
                patches=(
                    _remove("workflow", "v4 resolves the source workflow automatically"),
                    _add("run-id", "${{ github.run_id }}", "v4 identifies artifacts by run id"),
                ),
            ),
        ),
    )


def _simple(repository: str, from_version: str, to_version: str, description: str, *patches) -> PatchRule:
    return PatchRule(
        repository=repository,
        version_patches=(
            VersionPatch(
                from_version=from_version,
                to_version=to_version,
                description=description,
                patches=tuple(patches),
            ),
        ),
    )


def default_patch_rules() -> dict[str, PatchRule]:
    """Build the default catalog, keyed by repository.

    Every call returns fresh records, so callers may extend the result freely.
    """
    rules = [
        _checkout(),
        _setup_node(),
        _setup_python(),
        _upload_artifact(),
        _download_artifact(),
        _simple(
            "actions/cache",
            "v3",
            "v4",
            "Upgrade from v3 to v4 with performance and reliability improvements",
            _add("lookup-only", False, "v4 can check for a cache hit without downloading"),
            _add("fail-on-cache-miss", False, "v4 can fail the job on a cache miss"),
        ),
        _simple(
            "actions/setup-go",
            "v4",
            "v5",
            "Upgrade from v4 to v5 with enhanced Go version handling",
            _add("cache-dependency-path", "go.sum", "v5 accepts a dependency file for caching"),
            _add("check-latest", False, "v5 adds check-latest for Go version updates"),
        ),
        _simple(
            "actions/setup-java",
            "v3",
            "v4",
            "Upgrade from v3 to v4 with improved distribution support",
            _add("cache-dependency-path", "pom.xml", "v4 accepts a dependency file for caching"),
        ),
    ]
    return {rule.repository: rule for rule in rules}
