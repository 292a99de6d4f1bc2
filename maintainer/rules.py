"""Version rules: the default catalog, merging and custom rules files."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from .errors import RulesFileError
from .models import VersionRule

logger = logging.getLogger(__name__)


def default_rules() -> tuple[VersionRule, ...]:
    """Return the built-in rule set for common GitHub actions."""
    return (
        VersionRule(
            repository="actions/checkout",
            latest_version="v4",
            deprecated_versions=("v1",),
            recommendation="Use v4 for the latest features and bug fixes",
        ),
        VersionRule(
            repository="actions/setup-node",
            latest_version="v4",
            minimum_version="v3",
            deprecated_versions=("v1",),
        ),
        VersionRule(
            repository="actions/setup-python",
            latest_version="v5",
            minimum_version="v4",
            deprecated_versions=("v1", "v2"),
        ),
        VersionRule(
            repository="actions/upload-artifact",
            latest_version="v4",
            minimum_version="v3",
            deprecated_versions=("v1",),
        ),
        VersionRule(
            repository="actions/download-artifact",
            latest_version="v4",
            minimum_version="v3",
            deprecated_versions=("v1",),
        ),
        VersionRule(repository="actions/cache", latest_version="v4", minimum_version="v3"),
        VersionRule(repository="actions/setup-go", latest_version="v5", minimum_version="v4"),
        VersionRule(repository="actions/setup-java", latest_version="v4", minimum_version="v3"),
    )


def merge_rules(
    defaults: Iterable[VersionRule], custom: Iterable[VersionRule] | None
) -> tuple[VersionRule, ...]:
    """Merge custom rules over defaults, keyed by repository.

    A custom rule replaces the default rule for its repository as a whole.
    Default ordering is kept and new repositories are appended.
    """
    merged = {rule.repository: rule for rule in defaults}
    for rule in custom or ():
        merged[rule.repository] = rule
    return tuple(merged.values())


def validate_rule(rule: VersionRule, index: int) -> None:
    """Validate a custom rule, ``index`` being its 1-based position."""
    if not rule.repository:
        raise RulesFileError(f"rule {index}: repository field is required")

    if rule.migrate_to_repository or rule.migrate_to_version:
        if not rule.migrate_to_repository:
            raise RulesFileError(
                f"rule {index}: migrate_to_repository field is required when migration "
                f"is specified for repository {rule.repository}"
            )
        if not rule.migrate_to_version:
            raise RulesFileError(
                f"rule {index}: migrate_to_version field is required when migration "
                f"is specified for repository {rule.repository}"
            )
    elif not rule.latest_version:
        raise RulesFileError(
            f"rule {index}: latest_version field is required for repository {rule.repository}"
        )


def parse_rules(content: str) -> list[VersionRule]:
    """Parse and validate a JSON array of rules.

    Raises:
        RulesFileError: If the content is not a valid rules document
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise RulesFileError(f"unable to parse rules file as JSON: {e}") from e

    if not isinstance(data, list):
        raise RulesFileError("rules file must contain a JSON array of rules")

    rules = []
    for index, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            raise RulesFileError(f"rule {index}: expected an object")
        deprecated = item.get("deprecated_versions")
        if deprecated is not None and not (
            isinstance(deprecated, list) and all(isinstance(v, str) for v in deprecated)
        ):
            raise RulesFileError(f"rule {index}: deprecated_versions must be an array of strings")
        rule = VersionRule.from_dict(item)
        validate_rule(rule, index)
        rules.append(rule)
    return rules


def load_rules_file(path: str | Path) -> list[VersionRule]:
    """Load custom rules from a JSON file.

    Args:
        path: Path to the rules file

    Returns:
        Validated rules, in file order
    """
    try:
        content = Path(path).read_text()
    except OSError as e:
        raise RulesFileError(f"unable to read rules file: {e}") from e

    rules = parse_rules(content)
    logger.info("Loaded %d custom rules from %s", len(rules), path)
    return rules
