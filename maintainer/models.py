"""Core data models for the actions maintainer."""

from dataclasses import asdict, dataclass, field
from typing import Any

from .errors import InvalidPatchRuleError

# Field operations understood by the patch engine
OPERATION_ADD = "add"
OPERATION_REMOVE = "remove"
OPERATION_RENAME = "rename"
OPERATION_MODIFY = "modify"
OPERATIONS = (OPERATION_ADD, OPERATION_REMOVE, OPERATION_RENAME, OPERATION_MODIFY)

ISSUE_OUTDATED = "outdated"
ISSUE_DEPRECATED = "deprecated"
ISSUE_SECURITY = "security"
ISSUE_MIGRATION = "migration"

SEVERITY_LOW = "low"
SEVERITY_MEDIUM = "medium"
SEVERITY_HIGH = "high"


@dataclass(frozen=True)
class DependencyReference:
    """A single pinned usage of an action or reusable workflow."""

    repository: str  # owner/repo
    version: str  # tag, branch or commit SHA
    is_reusable: bool = False
    path: str | None = None  # sub-path inside the repository, if any
    context: str = ""  # e.g. "job:build/step:checkout"
    file_path: str = ""
    repo_full_name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "DependencyReference":
        return cls(
            repository=data["repository"],
            version=data["version"],
            is_reusable=bool(data.get("is_reusable", False)),
            path=data.get("path"),
            context=data.get("context", ""),
            file_path=data.get("file_path", ""),
            repo_full_name=data.get("repo_full_name", ""),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ResolvedReference:
    """A reference together with the commit it resolves to."""

    reference: DependencyReference
    resolved_sha: str = ""  # empty when resolution failed or was skipped
    aliases: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class VersionRule:
    """Version enforcement rule for one repository."""

    repository: str
    latest_version: str = ""
    minimum_version: str = ""
    deprecated_versions: tuple[str, ...] = ()
    recommendation: str = ""
    migrate_to_repository: str = ""
    migrate_to_version: str = ""

    @property
    def has_migration(self) -> bool:
        return bool(self.migrate_to_repository and self.migrate_to_version)

    @classmethod
    def from_dict(cls, data: dict) -> "VersionRule":
        return cls(
            repository=data.get("repository") or "",
            latest_version=data.get("latest_version") or "",
            minimum_version=data.get("minimum_version") or "",
            deprecated_versions=tuple(data.get("deprecated_versions") or ()),
            recommendation=data.get("recommendation") or "",
            migrate_to_repository=data.get("migrate_to_repository") or "",
            migrate_to_version=data.get("migrate_to_version") or "",
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["deprecated_versions"] = list(self.deprecated_versions)
        return data


@dataclass(frozen=True)
class FieldPatch:
    """A single operation on a configuration block."""

    operation: str  # add, remove, rename, modify
    field: str
    reason: str = ""
    new_field: str = ""  # rename only
    value: Any = None  # add and modify only

    def __post_init__(self):
        if self.operation not in OPERATIONS:
            raise InvalidPatchRuleError(f"Unknown operation: {self.operation}")
        if not self.field:
            raise InvalidPatchRuleError(f"Field must be specified for {self.operation} operation")
        if self.operation == OPERATION_RENAME and not self.new_field:
            raise InvalidPatchRuleError("new_field must be specified for rename operation")


@dataclass(frozen=True)
class VersionPatch:
    """Field operations needed for one version transition."""

    from_version: str
    to_version: str
    patches: tuple[FieldPatch, ...] = ()
    description: str = ""
    # Both set only when the transition also relocates the repository
    from_repository: str = ""
    to_repository: str = ""

    @property
    def is_relocation(self) -> bool:
        return bool(self.from_repository and self.to_repository)


@dataclass(frozen=True)
class PatchRule:
    """All known version transitions for one repository."""

    repository: str
    version_patches: tuple[VersionPatch, ...] = ()


@dataclass
class FieldAddition:
    field: str
    value: Any
    reason: str


@dataclass
class FieldRemoval:
    field: str
    reason: str


@dataclass
class FieldRename:
    old_field: str
    new_field: str
    reason: str


@dataclass
class FieldModification:
    field: str
    old_value: Any
    new_value: Any
    reason: str


@dataclass
class Patch:
    """Every change needed to move a reference to a new version or location."""

    repository: str
    from_version: str
    to_version: str
    from_repository: str = ""
    to_repository: str = ""
    description: str = ""
    additions: list[FieldAddition] = field(default_factory=list)
    removals: list[FieldRemoval] = field(default_factory=list)
    renames: list[FieldRename] = field(default_factory=list)
    modifications: list[FieldModification] = field(default_factory=list)
    applied: bool = False
    warnings: list[str] = field(default_factory=list)
    original_config: dict = field(default_factory=dict)
    updated_config: dict = field(default_factory=dict)

    @property
    def has_field_changes(self) -> bool:
        return bool(self.additions or self.removals or self.renames or self.modifications)

    @property
    def relocated(self) -> bool:
        return self.from_repository != self.to_repository

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Issue:
    """A version problem found for a single reference."""

    repository: str
    current_version: str
    issue_type: str  # outdated, deprecated, security, migration
    severity: str  # low, medium, high
    description: str
    suggested_version: str = ""
    migration_target: str = ""  # "owner/repo@version" for migrations
    has_transformations: bool = False
    schema_changes: list[str] = field(default_factory=list)
    context: str = ""
    file_path: str = ""

    def to_dict(self) -> dict:
        return asdict(self)
