"""Shared pydantic models — the contract between providers, the resolver and main.py."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Source(str, Enum):
    STRING = "string"
    BRANCH = "branch"
    COMMITS = "commits"


class Found(BaseModel):
    """Jira confirmed the issue exists."""

    model_config = ConfigDict(frozen=True)

    key: str  # canonical key as Jira reports it, e.g. ABC-123


class NotFound(BaseModel):
    """The candidate could not be confirmed (404, 403, timeout, ...)."""

    model_config = ConfigDict(frozen=True)

    candidate: str
    reason: str


KeyCheck = Found | NotFound


class IssueKeyResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    issue: str  # comma-joined, kept singular for single-key consumers
    issues: list[str]

    @classmethod
    def from_keys(cls, keys: list[str]) -> "IssueKeyResult":
        return cls(issue=",".join(keys), issues=keys)


# ---------------------------------------------------------------------------
# GitHub Actions event payload (only the fields we read)
# ---------------------------------------------------------------------------


class Commit(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    message: str = ""


class PullRequestHead(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    ref: str = ""


class PullRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    head: PullRequestHead | None = None


class GitHubEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    ref: str | None = None
    commits: list[Commit] = []
    pull_request: PullRequest | None = None

    @property
    def branch_name(self) -> str:
        """Head branch for pull_request events, otherwise ref without refs/heads/."""
        if self.pull_request and self.pull_request.head and self.pull_request.head.ref:
            return self.pull_request.head.ref
        return (self.ref or "").removeprefix("refs/heads/")

    @property
    def commit_messages(self) -> list[str]:
        return [c.message for c in self.commits]
