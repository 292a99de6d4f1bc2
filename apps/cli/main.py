"""CLI application for the actions maintainer."""

import json
import sys
from pathlib import Path

import typer
from rich.console import Console

from maintainer.analyzer import AnalyzerConfig, IssueAnalyzer
from maintainer.errors import MaintainerError
from maintainer.github import GitHubClient
from maintainer.logconfig import setup_logging
from maintainer.models import DependencyReference, Issue
from maintainer.patcher import PatchEngine
from maintainer.resolver import VersionResolver
from maintainer.rules import default_rules, load_rules_file, merge_rules

# Diagnostics go to stderr so stdout stays parseable JSON
console = Console(stderr=True, soft_wrap=True)


def read_input(file_path: str) -> str:
    """Read a file, or stdin for '-'."""
    if file_path == "-":
        return sys.stdin.read()

    path_obj = Path(file_path)
    if not path_obj.exists():
        console.print(f"Error: File {file_path} not found", style="red")
        raise typer.Exit(1)
    return path_obj.read_text()


def parse_references(content: str) -> list[DependencyReference]:
    """Parse a JSON array of reference objects."""
    data = json.loads(content)
    if not isinstance(data, list):
        raise ValueError("References must be a JSON array")

    references = []
    for index, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Reference {index} must be an object")
        references.append(DependencyReference.from_dict(item))
    return references


def format_json_output(issues: list[Issue]) -> str:
    """Format issues as JSON."""
    return json.dumps({"issues": [issue.to_dict() for issue in issues]}, indent=2)


def emit(content: str) -> None:
    # Plain stdout so JSON stays machine-readable
    typer.echo(content)


app = typer.Typer(
    name="maintainer",
    help="Actions maintainer - audit pinned GitHub action versions and plan upgrades",
    add_completion=False,
)


@app.command()
def analyze(
    file_path: str = typer.Argument(help="JSON file of action references (use '-' for stdin)"),
    rules_file: str | None = typer.Option(None, "--rules-file", "-r", help="Custom rules JSON, merged with defaults"),
    workflow_only: bool = typer.Option(False, "--workflow-only", help="Only analyze reusable workflows"),
    skip_resolution: bool = typer.Option(False, "--skip-resolution", help="Compare versions as strings only"),
    token: str | None = typer.Option(None, "--token", envvar="GITHUB_TOKEN", help="GitHub token"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Analyze action references and report version issues."""
    setup_logging(verbose)

    try:
        references = parse_references(read_input(file_path))
        custom_rules = load_rules_file(rules_file) if rules_file else None
        if custom_rules:
            console.print(f"Loaded {len(custom_rules)} custom rules from {rules_file}", style="dim")

        with GitHubClient(token=token) as client:
            resolver = VersionResolver(client, skip_resolution=skip_resolution)
            analyzer = IssueAnalyzer(
                resolver=resolver,
                config=AnalyzerConfig(workflow_only=workflow_only),
                custom_rules=custom_rules,
            )
            issues = analyzer.analyze_actions(references)

        emit(format_json_output(issues))
        if not issues:
            raise typer.Exit(2)  # Clean exit code

    except typer.Exit:
        raise
    except (MaintainerError, ValueError, KeyError) as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)


@app.command()
def patch(
    repository: str = typer.Argument(help="Current repository, e.g. actions/checkout"),
    from_version: str = typer.Argument(help="Current version"),
    to_version: str = typer.Argument(help="Target version"),
    to_repository: str | None = typer.Option(None, "--to-repository", help="Target repository for relocations"),
    with_block: str | None = typer.Option(None, "--with", help="The action's with: block as a JSON object"),
) -> None:
    """Show the configuration changes for an upgrade."""
    try:
        config = json.loads(with_block) if with_block else {}
        result = PatchEngine().build_patch_with_location(
            repository, from_version, to_version, to_repository or repository, config
        )
    except (MaintainerError, ValueError) as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    for warning in result.warnings:
        console.print(f"Warning: {warning}", style="yellow")

    emit(json.dumps(result.to_dict(), indent=2))
    if not result.applied:
        raise typer.Exit(2)  # No changes exit code


@app.command()
def rules(
    rules_file: str | None = typer.Option(None, "--rules-file", "-r", help="Custom rules JSON, merged with defaults"),
) -> None:
    """Print the effective rule set."""
    try:
        custom_rules = load_rules_file(rules_file) if rules_file else None
    except MaintainerError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    merged = merge_rules(default_rules(), custom_rules)
    emit(json.dumps([rule.to_dict() for rule in merged], indent=2))


if __name__ == "__main__":
    app()
