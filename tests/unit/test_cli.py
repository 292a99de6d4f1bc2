"""Tests for CLI functionality."""

import json
from unittest.mock import patch

from typer.testing import CliRunner

from apps.cli.main import app
from maintainer.errors import ResolutionError


class FailingClient:
    """GitHub client stand-in with the API unavailable."""

    def __init__(self, token=None):
        self.token = token

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None

    def resolve_ref(self, owner, repo, ref):
        raise ResolutionError("API unavailable")

    def get_tags_for_repo(self, owner, repo):
        raise ResolutionError("API unavailable")


class TestCLI:
    """Test CLI command interface."""

    def setup_method(self):
        """Setup test fixtures."""
        self.runner = CliRunner()

    def write_references(self, tmp_path, references):
        path = tmp_path / "references.json"
        path.write_text(json.dumps(references))
        return path

    def test_cli_help_command(self):
        """Should display help when called with --help."""
        result = self.runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "analyze" in result.output
        assert "patch" in result.output

    def test_analyze_reports_issues(self, tmp_path):
        """Should print issues as JSON."""
        refs = self.write_references(tmp_path, [{"repository": "actions/checkout", "version": "v1"}])

        with patch("apps.cli.main.GitHubClient", FailingClient):
            result = self.runner.invoke(app, ["analyze", str(refs)])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert {issue["issue_type"] for issue in data["issues"]} == {"outdated", "deprecated"}

    def test_analyze_clean_exit_code(self, tmp_path):
        """Should exit 2 when there are no issues."""
        refs = self.write_references(tmp_path, [{"repository": "actions/checkout", "version": "v4"}])

        with patch("apps.cli.main.GitHubClient", FailingClient):
            result = self.runner.invoke(app, ["analyze", str(refs), "--skip-resolution"])

        assert result.exit_code == 2
        assert json.loads(result.stdout) == {"issues": []}

    def test_analyze_with_rules_file(self, tmp_path):
        """Should merge custom rules over the defaults."""
        refs = self.write_references(tmp_path, [{"repository": "my-org/deploy", "version": "v1"}])
        rules = tmp_path / "rules.json"
        rules.write_text(json.dumps([{"repository": "my-org/deploy", "latest_version": "v2"}]))

        with patch("apps.cli.main.GitHubClient", FailingClient):
            result = self.runner.invoke(app, ["analyze", str(refs), "--rules-file", str(rules)])

        assert result.exit_code == 0
        assert "my-org/deploy" in result.stdout

    def test_analyze_invalid_rules_file(self, tmp_path):
        """Should fail with a readable error for invalid rules."""
        refs = self.write_references(tmp_path, [])
        rules = tmp_path / "rules.json"
        rules.write_text(json.dumps([{"repository": "my-org/deploy"}]))

        result = self.runner.invoke(app, ["analyze", str(refs), "--rules-file", str(rules)])

        assert result.exit_code == 1
        assert "latest_version field is required" in result.output

    def test_analyze_missing_file(self, tmp_path):
        """Should fail when the references file does not exist."""
        result = self.runner.invoke(app, ["analyze", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_analyze_rejects_non_object_reference(self, tmp_path):
        """Should report a readable error for references that are not objects."""
        refs = self.write_references(tmp_path, ["actions/checkout@v1"])

        with patch("apps.cli.main.GitHubClient", FailingClient):
            result = self.runner.invoke(app, ["analyze", str(refs), "--skip-resolution"])

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Reference 1 must be an object" in result.output

    def test_analyze_from_stdin(self):
        """Should read references from stdin."""
        stdin = json.dumps([{"repository": "actions/setup-node", "version": "v2"}])

        with patch("apps.cli.main.GitHubClient", FailingClient):
            result = self.runner.invoke(app, ["analyze", "-"], input=stdin)

        assert result.exit_code == 0
        assert "actions/setup-node" in result.stdout

    def test_patch_command(self):
        """Should print the patch for an upgrade."""
        result = self.runner.invoke(app, ["patch", "actions/checkout", "v1", "v4", "--with", '{"token": "x"}'])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["applied"] is True
        assert data["updated_config"] == {"fetch-depth": 1}

    def test_patch_no_changes_exit_code(self):
        """Should exit 2 when nothing applies."""
        result = self.runner.invoke(app, ["patch", "unsupported/action", "v1", "v2"])
        assert result.exit_code == 2

    def test_patch_invalid_with_block(self):
        """Should reject a with block that is not a JSON object."""
        result = self.runner.invoke(app, ["patch", "actions/checkout", "v1", "v4", "--with", '["token"]'])
        assert result.exit_code == 1

    def test_rules_command(self):
        """Should print the default rules."""
        result = self.runner.invoke(app, ["rules"])
        assert result.exit_code == 0
        repositories = [rule["repository"] for rule in json.loads(result.stdout)]
        assert "actions/checkout" in repositories
