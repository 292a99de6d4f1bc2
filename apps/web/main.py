"""FastAPI web application for the actions maintainer."""

import os
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from maintainer.analyzer import AnalyzerConfig, IssueAnalyzer
from maintainer.errors import MaintainerError
from maintainer.github import GitHubClient
from maintainer.models import DependencyReference, VersionRule
from maintainer.patcher import PatchEngine
from maintainer.resolver import VersionResolver
from maintainer.rules import default_rules, validate_rule

app = FastAPI(
    title="Actions Maintainer",
    description="Audit pinned GitHub action versions and plan upgrades",
    version="0.1.0",
)


class ReferenceModel(BaseModel):
    """A single action reference."""
    repository: str
    version: str
    is_reusable: bool = False
    path: Optional[str] = None
    context: str = ""
    file_path: str = ""
    repo_full_name: str = ""


class RuleModel(BaseModel):
    """A custom version rule."""
    repository: str
    latest_version: str = ""
    minimum_version: str = ""
    deprecated_versions: list[str] = Field(default_factory=list)
    recommendation: str = ""
    migrate_to_repository: str = ""
    migrate_to_version: str = ""


class AnalyzeRequest(BaseModel):
    """Request model for analyzing references."""
    references: list[ReferenceModel]
    rules: list[RuleModel] = Field(default_factory=list)
    workflow_only: bool = False
    skip_resolution: bool = False


class AnalyzeResponse(BaseModel):
    """Response model for analysis."""
    issues: list[dict]
    clean: bool


class PatchRequest(BaseModel):
    """Request model for building a patch."""
    repository: str
    from_version: str
    to_version: str
    to_repository: Optional[str] = None
    with_block: dict[str, Any] = Field(default_factory=dict, alias="with")


def create_client() -> GitHubClient:
    """Build a GitHub client from the environment."""
    return GitHubClient(token=os.environ.get("GITHUB_TOKEN"))


@app.post("/api/analyze", response_model=AnalyzeResponse)
def analyze_references(request: AnalyzeRequest):
    """Analyze action references against the effective rule set."""
    try:
        custom_rules = []
        for index, item in enumerate(request.rules, start=1):
            rule = VersionRule.from_dict(item.model_dump())
            validate_rule(rule, index)
            custom_rules.append(rule)

        references = [DependencyReference.from_dict(ref.model_dump()) for ref in request.references]
        with create_client() as client:
            analyzer = IssueAnalyzer(
                resolver=VersionResolver(client, skip_resolution=request.skip_resolution),
                config=AnalyzerConfig(workflow_only=request.workflow_only),
                custom_rules=custom_rules,
            )
            issues = analyzer.analyze_actions(references)

        return AnalyzeResponse(issues=[issue.to_dict() for issue in issues], clean=not issues)

    except HTTPException:
        # Re-raise HTTP exceptions (don't convert to 500)
        raise
    except MaintainerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error analyzing references: {str(e)}")


@app.post("/api/patch")
def build_patch(request: PatchRequest):
    """Preview the configuration changes for an upgrade."""
    try:
        patch = PatchEngine().preview_changes_with_location(
            request.repository,
            request.from_version,
            request.to_version,
            request.to_repository or request.repository,
            request.with_block,
        )
        return patch.to_dict()

    except MaintainerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error building patch: {str(e)}")


@app.get("/api/rules")
async def list_rules():
    """Return the default rule set."""
    return [rule.to_dict() for rule in default_rules()]


@app.get("/api/transformations")
async def list_transformations():
    """Return the repositories that have field transformations."""
    return {"repositories": PatchEngine().supported_actions()}
