"""
Error taxonomy for treegrab.

Every failure surfaced by the fetch and download pipeline is an instance of
``TreeGrabError``. The base class also serves as the catch-all for problems
that fit none of the specific kinds.
"""

import binascii
import json
from typing import Optional, TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .rate_limiter import RateLimitInfo


class TreeGrabError(Exception):
    """Base exception for treegrab operations."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.original_error:
            return f"{self.message} (Original: {self.original_error})"
        return self.message


class TransportError(TreeGrabError):
    """Network or HTTP transport level failure."""


class DecodeError(TreeGrabError):
    """A payload could not be parsed or its content could not be decoded."""


class FilesystemError(TreeGrabError):
    """Local I/O failure while creating directories or writing files."""


class ConfigurationError(TreeGrabError):
    """Invalid configuration, such as a malformed access token."""


class TreeAssemblyError(TreeGrabError):
    """A flat listing could not be assembled into a tree."""


class RemoteApiError(TreeGrabError):
    """The remote service explicitly reported a problem."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        rate_limit: Optional["RateLimitInfo"] = None
    ):
        self.status_code = status_code
        self.rate_limit = rate_limit
        super().__init__(message)


class RateLimitError(RemoteApiError):
    """The remote service refused a request because the rate limit is spent."""


def wrap_error(error: Exception, path: Optional[str] = None) -> TreeGrabError:
    """
    Convert an arbitrary exception into the matching taxonomy class.

    Args:
        error: Exception raised while fetching, decoding or writing
        path: Repository path the error relates to, used in the message

    Returns:
        The error itself if it already belongs to the taxonomy, otherwise
        a new TreeGrabError subclass wrapping it
    """
    if isinstance(error, TreeGrabError):
        return error

    context = f" for {path}" if path else ""

    if isinstance(error, httpx.HTTPError):
        return TransportError(f"Transport failure{context}", error)
    if isinstance(error, (json.JSONDecodeError, binascii.Error, UnicodeError, KeyError)):
        return DecodeError(f"Could not decode payload{context}", error)
    if isinstance(error, OSError):
        return FilesystemError(f"Filesystem failure{context}", error)

    return TreeGrabError(f"Unexpected error{context}", error)


__all__ = [
    "TreeGrabError",
    "TransportError",
    "DecodeError",
    "FilesystemError",
    "ConfigurationError",
    "TreeAssemblyError",
    "RemoteApiError",
    "RateLimitError",
    "wrap_error",
]
