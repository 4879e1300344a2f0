"""Abstract base class for issue existence checkers."""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Self

from issuekey.models import KeyCheck


class IssueChecker(ABC):
    @abstractmethod
    async def check(self, key: str) -> KeyCheck:
        """Return Found with the tracker's canonical key, or NotFound.

        Implementations report every per-key failure (missing issue, no
        permission, timeout) as NotFound instead of raising.
        """

    async def aclose(self) -> None:
        return None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
