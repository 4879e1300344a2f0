"""Find issue keys in text and keep the ones the tracker confirms exist."""

import asyncio
import logging
import re

from issuekey.exceptions import SourceError
from issuekey.models import Found, GitHubEvent, IssueKeyResult, Source
from issuekey.providers.base import IssueChecker

_LOG = logging.getLogger(__name__)

# PROJECT-NUMBER, e.g. ABC-123 (abc-123 matches too; Jira returns the canonical casing)
KEY_PATTERN = re.compile(r"[A-Z]+-[0-9]+", re.IGNORECASE | re.ASCII)

_SELECTORS = {Source.BRANCH.value: Source.BRANCH, Source.COMMITS.value: Source.COMMITS}


def extract_candidates(text: str | None) -> list[str]:
    """Return candidate keys in order of first appearance, exact repeats removed."""
    return list(dict.fromkeys(KEY_PATTERN.findall(text or "")))


def choose_source(string: str | None = None, from_: str | None = None) -> Source:
    """Pick the text source: an explicit string, then the from selector, then the branch."""
    if string:
        return Source.STRING
    if from_:
        try:
            return _SELECTORS[from_.strip().lower()]
        except KeyError:
            raise SourceError(f"Unknown source '{from_}'. Valid: {', '.join(_SELECTORS)}") from None
    return Source.BRANCH


def source_text(source: Source, *, string: str | None = None, event: GitHubEvent | None = None) -> str:
    match source:
        case Source.STRING:
            if string is None:
                raise SourceError("String source selected but no string was given")
            return string
        case Source.BRANCH | Source.COMMITS if event is None:
            raise SourceError(f"'{source.value}' source needs a GitHub event payload (GITHUB_EVENT_PATH)")
        case Source.BRANCH:
            return event.branch_name
        case Source.COMMITS:
            # One message per line keeps first-seen order across commits
            return "\n".join(event.commit_messages)
    raise SourceError(f"Unsupported source {source!r}")


class KeyResolver:
    def __init__(self, checker: IssueChecker) -> None:
        self._checker = checker

    async def find_keys_in(self, text: str | None) -> IssueKeyResult | None:
        """Return the confirmed keys found in text, or None if there are none.

        Every unique candidate is checked concurrently. Output order follows
        the text, not the order in which the checks complete, and two
        candidates confirming the same canonical key count once.
        """
        candidates = extract_candidates(text)
        if not candidates:
            _LOG.debug("No candidate keys in %r", text)
            return None

        _LOG.debug("Checking candidates: %s", ", ".join(candidates))
        checks = await asyncio.gather(*(self._checker.check(c) for c in candidates))

        keys: list[str] = []
        for candidate, check in zip(candidates, checks):
            if not isinstance(check, Found):
                _LOG.debug("Dropping %s: %s", candidate, check.reason)
                continue
            if check.key not in keys:
                keys.append(check.key)

        if not keys:
            return None
        return IssueKeyResult.from_keys(keys)

    async def resolve(
        self,
        source: Source,
        *,
        string: str | None = None,
        event: GitHubEvent | None = None,
    ) -> IssueKeyResult | None:
        text = source_text(source, string=string, event=event)
        _LOG.debug("Scanning %s source", source.value)
        return await self.find_keys_in(text)

    async def execute(
        self,
        *,
        string: str | None = None,
        from_: str | None = None,
        event: GitHubEvent | None = None,
    ) -> IssueKeyResult | None:
        """Choose the source from the inputs, then resolve it."""
        return await self.resolve(choose_source(string, from_), string=string, event=event)
