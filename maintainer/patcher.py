"""Building and applying configuration patches for action upgrades."""

import copy
import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

from .errors import ConfigBlockError
from .models import (
    OPERATION_ADD,
    OPERATION_MODIFY,
    OPERATION_REMOVE,
    OPERATION_RENAME,
    FieldAddition,
    FieldModification,
    FieldPatch,
    FieldRemoval,
    FieldRename,
    Patch,
    PatchRule,
    VersionPatch,
)
from .patch_rules import default_patch_rules

logger = logging.getLogger(__name__)


def to_config_map(block: Any) -> dict[str, Any]:
    """Convert a configuration block to a string-keyed map.

    A plain ``dict`` with string keys is returned as is, so patches applied to
    the result are visible to the caller.

    Raises:
        ConfigBlockError: If the block cannot be represented as such a map
    """
    if block is None:
        return {}

    if hasattr(block, "model_dump"):
        block = block.model_dump()
    elif dataclasses.is_dataclass(block) and not isinstance(block, type):
        block = dataclasses.asdict(block)

    if not isinstance(block, Mapping):
        raise ConfigBlockError(f"Configuration block must be a mapping, got {type(block).__name__}")

    for key in block:
        if not isinstance(key, str):
            raise ConfigBlockError(f"Non-string key found in configuration block: {key!r}")

    return block if isinstance(block, dict) else dict(block)


class PatchEngine:
    """Catalog of field transformations and the machinery to apply them."""

    def __init__(self, rules: Mapping[str, PatchRule] | None = None):
        """Initialize patch engine.

        Args:
            rules: Catalog keyed by repository; the default catalog if omitted
        """
        self._rules: dict[str, PatchRule] = dict(rules) if rules is not None else default_patch_rules()

    def add_patch_rule(self, rule: PatchRule) -> None:
        """Register a rule, replacing any rule for the same repository."""
        self._rules[rule.repository] = rule

    def patch_rules(self) -> dict[str, PatchRule]:
        return dict(self._rules)

    def supported_actions(self) -> list[str]:
        return sorted(self._rules)

    def find_version_patch(
        self, from_repository: str, from_version: str, to_version: str, to_repository: str
    ) -> VersionPatch | None:
        """Find the transition for an exact version and repository pair.

        Rules may be registered under either end of a relocation, so the
        target repository is consulted when the source has no rule.
        """
        rule = self._rules.get(from_repository) or self._rules.get(to_repository)
        if rule is None:
            return None

        for version_patch in rule.version_patches:
            if version_patch.from_version != from_version or version_patch.to_version != to_version:
                continue
            if version_patch.is_relocation:
                if (
                    version_patch.from_repository == from_repository
                    and version_patch.to_repository == to_repository
                ):
                    return version_patch
            elif from_repository == to_repository:
                return version_patch
        return None

    def get_patch_info(self, repository: str, from_version: str, to_version: str) -> VersionPatch | None:
        return self.find_version_patch(repository, from_version, to_version, repository)

    def has_patch(self, repository: str, from_version: str, to_version: str) -> bool:
        return self.has_patch_with_location(repository, from_version, to_version, repository)

    def has_patch_with_location(
        self, from_repository: str, from_version: str, to_version: str, to_repository: str
    ) -> bool:
        return self.find_version_patch(from_repository, from_version, to_version, to_repository) is not None

    def build_patch(self, repository: str, from_version: str, to_version: str, config: Any = None) -> Patch:
        """Build and apply the patch for a same-repository upgrade."""
        return self.build_patch_with_location(repository, from_version, to_version, repository, config)

    def build_patch_with_location(
        self,
        from_repository: str,
        from_version: str,
        to_version: str,
        to_repository: str,
        config: Any = None,
    ) -> Patch:
        """Build and apply a patch for an upgrade that may also relocate the action.

        Args:
            from_repository: Current repository of the action
            from_version: Current version
            to_version: Target version
            to_repository: Target repository, equal to the source when not moving
            config: The action's configuration block, mutated in place when a dict

        Returns:
            Patch describing every change; ``applied`` is False when no
            transition matches
        """
        config_map = to_config_map(config)
        patch = Patch(
            repository=from_repository,
            from_version=from_version,
            to_version=to_version,
            from_repository=from_repository,
            to_repository=to_repository,
            original_config=copy.deepcopy(config_map),
            updated_config=config_map,
        )

        version_patch = self.find_version_patch(from_repository, from_version, to_version, to_repository)
        if version_patch is None:
            logger.debug(
                "No patch for %s@%s -> %s@%s", from_repository, from_version, to_repository, to_version
            )
            return patch

        patch.description = version_patch.description
        for field_patch in version_patch.patches:
            apply_field_patch(config_map, field_patch, patch)

        patch.applied = patch.has_field_changes or patch.relocated
        return patch

    def preview_changes(self, repository: str, from_version: str, to_version: str, config: Any = None) -> Patch:
        """Build a patch against a copy, leaving ``config`` untouched."""
        return self.build_patch(repository, from_version, to_version, copy.deepcopy(to_config_map(config)))

    def preview_changes_with_location(
        self,
        from_repository: str,
        from_version: str,
        to_version: str,
        to_repository: str,
        config: Any = None,
    ) -> Patch:
        return self.build_patch_with_location(
            from_repository, from_version, to_version, to_repository, copy.deepcopy(to_config_map(config))
        )


def apply_field_patch(config: dict[str, Any], field_patch: FieldPatch, patch: Patch) -> None:
    """Apply one operation to ``config`` and record the outcome on ``patch``.

    Conflicts never overwrite or drop data; they are recorded as warnings.
    """
    operation = field_patch.operation
    field = field_patch.field

    if operation == OPERATION_ADD:
        if field in config:
            patch.warnings.append(f"Field {field} already exists, skipping add operation")
            return
        value = copy.deepcopy(field_patch.value)
        config[field] = value
        patch.additions.append(FieldAddition(field=field, value=value, reason=field_patch.reason))

    elif operation == OPERATION_REMOVE:
        if field not in config:
            patch.warnings.append(f"Field {field} does not exist, skipping remove operation")
            return
        del config[field]
        patch.removals.append(FieldRemoval(field=field, reason=field_patch.reason))

    elif operation == OPERATION_RENAME:
        new_field = field_patch.new_field
        if field not in config:
            patch.warnings.append(f"Field {field} does not exist, skipping rename operation")
            return
        if new_field in config:
            patch.warnings.append(f"Target field {new_field} already exists, skipping rename operation")
            return
        config[new_field] = config.pop(field)
        patch.renames.append(FieldRename(old_field=field, new_field=new_field, reason=field_patch.reason))

    elif operation == OPERATION_MODIFY:
        if field not in config:
            patch.warnings.append(f"Field {field} does not exist, skipping modify operation")
            return
        old_value = config[field]
        if old_value == field_patch.value:
            patch.warnings.append(f"Field {field} already has the target value, skipping modify operation")
            return
        new_value = copy.deepcopy(field_patch.value)
        config[field] = new_value
        patch.modifications.append(
            FieldModification(field=field, old_value=old_value, new_value=new_value, reason=field_patch.reason)
        )
