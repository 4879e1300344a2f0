"""Exceptions for failures that abort a run.

A candidate key that Jira does not confirm is *not* an error; it is reported
as a :class:`~issuekey.models.NotFound` check outcome and dropped.
"""


class IssueKeyError(Exception):
    """Base exception for all issuekey errors."""


class SourceError(IssueKeyError):
    """Raised when the text source is unknown or has no data to scan."""


class EventError(IssueKeyError):
    """Raised when the GitHub event payload cannot be read or parsed."""


class AuthenticationError(IssueKeyError):
    """Raised when Jira rejects the configured credentials."""
