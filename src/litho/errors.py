"""
Errors raised by litho.

None of these are retried. They unwind to ``main`` which logs them and exits
non-zero; the next run resumes from whatever is already on disk.
"""


class LithoError(Exception):
    """Base class for every error raised by this package."""


class SerError(LithoError):
    """Response body was not JSON, or lacked the expected field."""


class FetchError(LithoError):
    """Transport-level failure talking to the token or search endpoint."""


class SearchError(FetchError):
    """The search endpoint answered with a non-success status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Problem fetching metadata: HTTP {status_code} {body}".rstrip())


class DownloadError(LithoError):
    """Downloading an item or creating its file failed."""


class AuthorizationFailed(LithoError):
    """The OAuth redirect carried no authorization code."""


class TokenStoreError(LithoError):
    """The keyring backend could not read or write the cached token."""
