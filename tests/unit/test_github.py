"""Tests for the GitHub API client."""

import httpx
import pytest

from maintainer.errors import ResolutionError
from maintainer.github import GitHubClient

COMMIT_SHA = "8e5e7e5ab8b370d6c329ec480221332ada57f0ab"
TAG_OBJECT_SHA = "c0ffee0000000000000000000000000000000000"


def make_client(handler, **kwargs):
    return GitHubClient(transport=httpx.MockTransport(handler), **kwargs)


class TestResolveRef:
    """Test ref resolution against the API."""

    def test_resolve_lightweight_tag(self):
        """Should return the commit a lightweight tag points at."""
        def handler(request):
            if request.url.path == "/repos/actions/checkout/git/ref/tags/v4":
                return httpx.Response(200, json={"object": {"sha": COMMIT_SHA, "type": "commit"}})
            return httpx.Response(404)

        assert make_client(handler).resolve_ref("actions", "checkout", "v4") == COMMIT_SHA

    def test_resolve_annotated_tag(self):
        """Should peel annotated tags to their commit."""
        def handler(request):
            if request.url.path == "/repos/actions/checkout/git/ref/tags/v4":
                return httpx.Response(200, json={"object": {"sha": TAG_OBJECT_SHA, "type": "tag"}})
            if request.url.path == f"/repos/actions/checkout/git/tags/{TAG_OBJECT_SHA}":
                return httpx.Response(200, json={"object": {"sha": COMMIT_SHA, "type": "commit"}})
            return httpx.Response(404)

        assert make_client(handler).resolve_ref("actions", "checkout", "v4") == COMMIT_SHA

    def test_resolve_branch(self):
        """Should try branches after tags."""
        seen = []

        def handler(request):
            seen.append(request.url.path)
            if request.url.path == "/repos/actions/checkout/git/ref/heads/main":
                return httpx.Response(200, json={"object": {"sha": COMMIT_SHA, "type": "commit"}})
            return httpx.Response(404)

        assert make_client(handler).resolve_ref("actions", "checkout", "main") == COMMIT_SHA
        assert seen[0].endswith("/git/ref/tags/main")

    def test_resolve_commit(self):
        """Should fall back to looking the ref up as a commit."""
        def handler(request):
            if request.url.path == f"/repos/actions/checkout/commits/{COMMIT_SHA[:7]}":
                return httpx.Response(200, json={"sha": COMMIT_SHA})
            return httpx.Response(404)

        assert make_client(handler).resolve_ref("actions", "checkout", COMMIT_SHA[:7]) == COMMIT_SHA

    def test_unresolvable_ref(self):
        """Should raise when no lookup succeeds."""
        client = make_client(lambda request: httpx.Response(404))
        with pytest.raises(ResolutionError, match="Could not resolve reference v99"):
            client.resolve_ref("actions", "checkout", "v99")

    def test_server_error(self):
        """Should raise a resolution error for server failures."""
        client = make_client(lambda request: httpx.Response(500))
        with pytest.raises(ResolutionError, match="HTTP error"):
            client.resolve_ref("actions", "checkout", "v4")

    def test_network_error(self):
        """Should wrap transport failures."""
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(ResolutionError, match="Network error"):
            make_client(handler).resolve_ref("actions", "checkout", "v4")

    def test_token_header(self):
        """Should authenticate when a token is configured."""
        headers = {}

        def handler(request):
            headers.update(request.headers)
            return httpx.Response(200, json={"object": {"sha": COMMIT_SHA, "type": "commit"}})

        make_client(handler, token="secret").resolve_ref("actions", "checkout", "v4")
        assert headers["authorization"] == "Bearer secret"


class TestGetTags:
    """Test paginated tag listing."""

    def test_paginated_tags(self):
        """Should follow next links until exhausted."""
        def handler(request):
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=[{"name": "v3", "commit": {"sha": "b" * 40}}])
            return httpx.Response(
                200,
                json=[
                    {"name": "v4", "commit": {"sha": "a" * 40}},
                    {"name": "v4.2.1", "commit": {"sha": "a" * 40}},
                ],
                headers={"Link": '<https://api.github.com/repos/actions/checkout/tags?per_page=100&page=2>; rel="next"'},
            )

        with make_client(handler) as client:
            tags = client.get_tags_for_repo("actions", "checkout")

        assert tags == {"v4": "a" * 40, "v4.2.1": "a" * 40, "v3": "b" * 40}

    def test_tag_listing_failure(self):
        """Should raise a resolution error when a page fails."""
        client = make_client(lambda request: httpx.Response(403))
        with pytest.raises(ResolutionError, match="Failed to list tags"):
            client.get_tags_for_repo("actions", "checkout")
