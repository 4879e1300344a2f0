"""Shared test fixtures."""

import asyncio
from pathlib import Path

import pytest

import issuekey.settings as settings_module
from issuekey.models import Found, GitHubEvent, KeyCheck, NotFound
from issuekey.providers.base import IssueChecker
from issuekey.settings import JiraSettings

BASE_URL = "https://test.atlassian.net"

_ENV_VARS = (
    "JIRA_PROFILE",
    "JIRA_BASE_URL",
    "JIRA_USER_EMAIL",
    "JIRA_API_TOKEN",
    "JIRA_TIMEOUT",
    "JIRA_MAX_CONCURRENCY",
    "INPUT_STRING",
    "INPUT_FROM",
    "GITHUB_EVENT_PATH",
    "GITHUB_OUTPUT",
)


class FakeChecker(IssueChecker):
    """In-memory checker: known maps candidate -> canonical key, delays are in seconds."""

    def __init__(self, known: dict[str, str] | None = None, delays: dict[str, float] | None = None) -> None:
        self.known = known or {}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.completed: list[str] = []
        self.closed = False

    async def check(self, key: str) -> KeyCheck:
        self.calls.append(key)
        await asyncio.sleep(self.delays.get(key, 0))
        self.completed.append(key)
        if key in self.known:
            return Found(key=self.known[key])
        return NotFound(candidate=key, reason="HTTP 404")

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep the runner's env, .env files and the user's config out of tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "CONFIG_PATH", tmp_path / "missing-config.toml")
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


@pytest.fixture
def jira_settings() -> JiraSettings:
    return JiraSettings(  # type: ignore[call-arg]
        base_url=BASE_URL,
        user_email="test@example.com",
        api_token="test-token",
    )


@pytest.fixture
def push_event() -> GitHubEvent:
    return GitHubEvent.model_validate(
        {
            "ref": "refs/heads/feature/ABC-123-new-feature",
            "commits": [
                {"message": "Fix issue DEF-456 and GHI-789"},
                {"message": "Update documentation"},
            ],
        }
    )


@pytest.fixture
def make_checker():
    return FakeChecker
