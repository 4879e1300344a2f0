"""Jira REST API v2 existence checker."""

import asyncio

import httpx

from issuekey.exceptions import AuthenticationError
from issuekey.models import Found, KeyCheck, NotFound
from issuekey.providers.base import IssueChecker
from issuekey.settings import JiraSettings

ISSUE_PATH = "/rest/api/2/issue/{key}"

# Ask for the bare issue: no fields, no expansions. Only "key" is read back.
_ISSUE_PARAMS = {"fields": "", "expand": ""}


class JiraChecker(IssueChecker):
    def __init__(self, settings: JiraSettings, *, client: httpx.AsyncClient | None = None) -> None:
        if not settings.base_url:
            raise RuntimeError("base_url is required")
        if not settings.user_email or not settings.api_token:
            raise RuntimeError("user_email and api_token are required")
        self._base_url = settings.base_url
        self._semaphore = asyncio.Semaphore(settings.max_concurrency)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=settings.base_url,
            auth=(settings.user_email, settings.api_token.get_secret_value()),
            headers={"Accept": "application/json"},
            timeout=settings.timeout,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def check(self, key: str) -> KeyCheck:
        async with self._semaphore:
            try:
                response = await self._client.get(ISSUE_PATH.format(key=key), params=_ISSUE_PARAMS)
            except httpx.TimeoutException:
                return NotFound(candidate=key, reason="timed out")
            except httpx.RequestError as exc:
                return NotFound(candidate=key, reason=f"request failed: {exc!r}")

        if response.status_code == 401:
            # Bad credentials fail every key alike, so this aborts the run
            raise AuthenticationError(
                f"Jira returned 401 for {key}. Check JIRA_USER_EMAIL and JIRA_API_TOKEN for the active profile."
            )
        if not response.is_success:
            return NotFound(candidate=key, reason=f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            return NotFound(candidate=key, reason="response is not JSON")
        canonical = payload.get("key") if isinstance(payload, dict) else None
        if not isinstance(canonical, str) or not canonical:
            return NotFound(candidate=key, reason="response has no issue key")
        return Found(key=canonical)
