"""Pytest configuration and fixtures."""


import pytest

from maintainer.errors import ResolutionError

CHECKOUT_V4_SHA = "def456abc789def456abc789def456abc789def4"
CHECKOUT_V3_SHA = "0a1b2c3d4e5f60718293a4b5c6d7e8f901234567"


class FakeRemote:
    """Deterministic remote authority that records every call."""

    def __init__(self, tags=None, branches=None):
        self.tags = tags or {}  # "owner/repo" -> {tag: sha}
        self.branches = branches or {}  # "owner/repo" -> {branch: sha}
        self.resolve_calls = []
        self.tag_calls = []
        self.fail = False

    @property
    def call_count(self):
        return len(self.resolve_calls) + len(self.tag_calls)

    def resolve_ref(self, owner, repo, ref):
        self.resolve_calls.append((owner, repo, ref))
        if self.fail:
            raise ResolutionError("API unavailable")

        name = f"{owner}/{repo}"
        for refs in (self.tags.get(name, {}), self.branches.get(name, {})):
            if ref in refs:
                return refs[ref]
        known = set(self.tags.get(name, {}).values()) | set(self.branches.get(name, {}).values())
        if ref in known:
            return ref
        raise ResolutionError(f"Could not resolve reference {ref} in {name}")

    def get_tags_for_repo(self, owner, repo):
        self.tag_calls.append((owner, repo))
        if self.fail:
            raise ResolutionError("API unavailable")
        return dict(self.tags.get(f"{owner}/{repo}", {}))


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def checkout_tags():
    """Tag set for actions/checkout where v4 and v4.2.1 share a commit."""
    return {
        "v4": CHECKOUT_V4_SHA,
        "v4.2.1": CHECKOUT_V4_SHA,
        "v4.2.0": "1111111111111111111111111111111111111111",
        "v3": CHECKOUT_V3_SHA,
        "v3.6.0": CHECKOUT_V3_SHA,
    }


@pytest.fixture
def remote(checkout_tags):
    """Fake remote authority with actions/checkout data."""
    return FakeRemote(
        tags={"actions/checkout": checkout_tags},
        branches={"actions/checkout": {"main": "2222222222222222222222222222222222222222"}},
    )


@pytest.fixture
def clock():
    return FakeClock()
