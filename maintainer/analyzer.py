"""Evaluation of action references against version rules."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from .detect import FORMAT_SHA, FORMAT_TAG, extract_major, identify, is_branch, major_distance
from .errors import InvalidRepositoryError, ResolutionError
from .models import (
    ISSUE_DEPRECATED,
    ISSUE_MIGRATION,
    ISSUE_OUTDATED,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    DependencyReference,
    Issue,
    Patch,
    VersionPatch,
    VersionRule,
)
from .patcher import PatchEngine
from .resolver import split_repository
from .rules import default_rules, merge_rules

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    """The parts of ``VersionResolver`` the analyzer relies on."""

    def is_version_outdated(self, repository: str, current_version: str, latest_version: str) -> bool: ...

    def resolve_ref(self, owner: str, repo: str, ref: str) -> str: ...


@dataclass
class AnalyzerConfig:
    """Options for issue analysis."""

    workflow_only: bool = False  # only reusable workflow references


class IssueAnalyzer:
    """Finds outdated, deprecated and relocated action references."""

    def __init__(
        self,
        resolver: Resolver | None = None,
        config: AnalyzerConfig | None = None,
        custom_rules: Iterable[VersionRule] | None = None,
        patcher: PatchEngine | None = None,
        rules: Iterable[VersionRule] | None = None,
    ):
        """Initialize analyzer.

        Args:
            resolver: Version resolver for commit-accurate comparisons
            config: Analysis options
            custom_rules: Rules overriding the defaults by repository
            patcher: Patch engine used for schema change summaries
            rules: Base rule set; the built-in defaults if omitted
        """
        self.resolver = resolver
        self.config = config or AnalyzerConfig()
        self.patcher = patcher or PatchEngine()
        base = tuple(rules) if rules is not None else default_rules()
        self._rules = {rule.repository: rule for rule in merge_rules(base, custom_rules)}

        if custom_rules:
            logger.debug("Using %d rules (%d base + custom)", len(self._rules), len(base))
        if self.config.workflow_only:
            logger.debug("Analyzer configured for workflow-only mode")

    @property
    def rules(self) -> list[VersionRule]:
        return list(self._rules.values())

    def find_rule(self, repository: str) -> VersionRule | None:
        return self._rules.get(repository)

    def analyze_actions(self, references: Iterable[DependencyReference]) -> list[Issue]:
        """Analyze references and return every issue found.

        Args:
            references: Action references extracted from workflow files

        Returns:
            Issues in reference order; empty when everything is current
        """
        references = list(references)
        if self.config.workflow_only:
            selected = [ref for ref in references if ref.is_reusable]
            logger.debug(
                "Filtered to %d reusable workflows from %d references", len(selected), len(references)
            )
            references = selected

        issues: list[Issue] = []
        for i, reference in enumerate(references, start=1):
            logger.debug(
                "Analyzing %d/%d - %s@%s (context: %s)",
                i,
                len(references),
                reference.repository,
                reference.version,
                reference.context,
            )
            found = self.analyze_action(reference)
            logger.debug("Found %d issues for %s@%s", len(found), reference.repository, reference.version)
            issues.extend(found)

        logger.debug("Completed analysis, found %d total issues", len(issues))
        return issues

    def analyze_action(self, reference: DependencyReference) -> list[Issue]:
        """Analyze a single reference against its rule."""
        rule = self.find_rule(reference.repository)
        if rule is None:
            logger.debug("No rule for %s, skipping", reference.repository)
            return []

        issues = []
        if rule.latest_version and self.is_outdated(reference.repository, reference.version, rule.latest_version):
            issues.append(self._outdated_issue(reference, rule))
        if reference.version in rule.deprecated_versions:
            issues.append(self._deprecated_issue(reference, rule))
        if rule.has_migration:
            issues.append(self._migration_issue(reference, rule))
        return issues

    def _outdated_issue(self, reference: DependencyReference, rule: VersionRule) -> Issue:
        issue = Issue(
            repository=reference.repository,
            current_version=reference.version,
            suggested_version=self.suggest_version(reference.repository, reference.version, rule.latest_version),
            issue_type=ISSUE_OUTDATED,
            severity=self.determine_severity(reference.version, rule),
            description=(
                f"Action {reference.repository} is using version {reference.version}, "
                f"latest is {rule.latest_version}"
            ),
            context=reference.context,
            file_path=reference.file_path,
        )
        self._attach_schema_changes(
            issue, self.patcher.get_patch_info(reference.repository, reference.version, rule.latest_version)
        )
        logger.debug("Outdated: %s@%s (severity %s)", reference.repository, reference.version, issue.severity)
        return issue

    def _deprecated_issue(self, reference: DependencyReference, rule: VersionRule) -> Issue:
        issue = Issue(
            repository=reference.repository,
            current_version=reference.version,
            suggested_version=self.suggest_version(reference.repository, reference.version, rule.latest_version),
            issue_type=ISSUE_DEPRECATED,
            severity=SEVERITY_HIGH,
            description=f"Action {reference.repository} version {reference.version} is deprecated",
            context=reference.context,
            file_path=reference.file_path,
        )
        self._attach_schema_changes(
            issue, self.patcher.get_patch_info(reference.repository, reference.version, rule.latest_version)
        )
        logger.debug("Deprecated: %s@%s", reference.repository, reference.version)
        return issue

    def _migration_issue(self, reference: DependencyReference, rule: VersionRule) -> Issue:
        target = f"{rule.migrate_to_repository}@{rule.migrate_to_version}"
        issue = Issue(
            repository=reference.repository,
            current_version=reference.version,
            migration_target=target,
            issue_type=ISSUE_MIGRATION,
            severity=SEVERITY_MEDIUM,
            description=rule.recommendation
            or f"Action {reference.repository} has migrated to {rule.migrate_to_repository}",
            context=reference.context,
            file_path=reference.file_path,
        )
        version_patch = self.patcher.find_version_patch(
            reference.repository, reference.version, rule.migrate_to_version, rule.migrate_to_repository
        ) or self.patcher.get_patch_info(reference.repository, reference.version, rule.migrate_to_version)
        self._attach_schema_changes(issue, version_patch)
        logger.debug("Migration: %s -> %s", reference.repository, target)
        return issue

    @staticmethod
    def _attach_schema_changes(issue: Issue, version_patch: VersionPatch | None) -> None:
        if version_patch is None:
            return
        issue.has_transformations = True
        issue.schema_changes = [version_patch.description]
        issue.schema_changes.extend(f"{p.operation}: {p.reason}" for p in version_patch.patches)

    def is_outdated(self, repository: str, current: str, latest: str) -> bool:
        """Check staleness, through the resolver when one is configured."""
        if current == latest or is_branch(current):
            return False
        if self.resolver is not None and repository:
            return self.resolver.is_version_outdated(repository, current, latest)
        return _compare_outdated(current, latest)

    def determine_severity(self, version: str, rule: VersionRule) -> str:
        """Severity of an outdated reference.

        Below the rule's minimum version is high; two or more major versions
        behind latest is medium; anything else is low.
        """
        if rule.minimum_version and _compare_outdated(version, rule.minimum_version):
            return SEVERITY_HIGH

        if major_distance(version, rule.latest_version) >= 2:
            return SEVERITY_MEDIUM
        return SEVERITY_LOW

    def suggest_version(self, repository: str, current: str, latest_tag: str) -> str:
        """Suggest ``latest_tag`` in the same format as ``current``.

        SHA pins get the commit the latest tag points at; tags and branches
        get the tag itself.
        """
        if identify(current) != FORMAT_SHA or self.resolver is None:
            return latest_tag

        try:
            owner, repo = split_repository(repository)
            return self.resolver.resolve_ref(owner, repo, latest_tag) or latest_tag
        except (InvalidRepositoryError, ResolutionError) as e:
            logger.debug("Could not resolve %s@%s, suggesting the tag: %s", repository, latest_tag, e)
            return latest_tag

    def get_transformation_info(self, repository: str, current: str, target: str) -> VersionPatch | None:
        return self.patcher.get_patch_info(repository, current, target)

    def preview_transformation(self, repository: str, current: str, target: str, config: Any = None) -> Patch:
        return self.patcher.preview_changes(repository, current, target, config)

    def supported_transformations(self) -> list[str]:
        return self.patcher.supported_actions()


def _compare_outdated(current: str, latest: str) -> bool:
    """String-based staleness check used without commit resolution."""
    if current == latest or is_branch(current):
        return False

    if identify(current) == identify(latest) == FORMAT_TAG:
        current_major = extract_major(current)
        latest_major = extract_major(latest)
        if current_major and latest_major:
            return current_major < latest_major

    return current != latest
