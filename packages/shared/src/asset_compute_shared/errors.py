"""Error hierarchy surfaced by a worker invocation.

Every failure that leaves the worker core is an AssetComputeError subclass
carrying:

  - reason    — stable machine-readable kind (e.g. "InvalidUrl")
  - message   — human-readable description, safe to log (URLs redacted)
  - params    — the invocation's input parameters, attached on the way out
                so operators can see what was requested
  - retryable — whether the hosting layer may retry the whole invocation

Validation errors (InvalidUrl, MissingUrl, InvalidLocalFile, InvalidCallback,
UnsupportedPipelineMode) are raised before any network attempt and are never
retryable.
"""

from __future__ import annotations

from typing import Any


class AssetComputeError(Exception):
    """Base class for all errors raised by the worker core."""

    reason: str = "GenericError"
    retryable: bool = False

    def __init__(self, message: str, *, params: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.params = params

    def with_params(self, params: dict[str, Any]) -> AssetComputeError:
        """Attach invocation params unless an inner layer already did."""
        if self.params is None:
            self.params = params
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "reason": self.reason,
            "message": self.message,
            "params": self.params,
        }


class InvalidUrlError(AssetComputeError):
    """A source or target locator is not an acceptable HTTPS URL."""

    reason = "InvalidUrl"

    def __init__(self, url: str, **kwargs: Any) -> None:
        super().__init__(f"Invalid Https Url: {url}", **kwargs)
        self.url = url


class MissingUrlError(InvalidUrlError):
    """A locator is missing entirely or is not a URL at all."""

    reason = "MissingUrl"

    def __init__(self, url: Any = None, **kwargs: Any) -> None:
        value = "" if url is None else str(url)
        AssetComputeError.__init__(self, f"Invalid or Missing Url {value}", **kwargs)
        self.url = value


class InvalidLocalFileError(AssetComputeError):
    """Unit-test mode: the source path escapes the input root or does not exist."""

    reason = "InvalidLocalFile"

    def __init__(self, path: str, **kwargs: Any) -> None:
        super().__init__(f"Invalid or missing local file: {path}", **kwargs)
        self.path = path


class TransferFailedError(AssetComputeError):
    """A network transfer failed after the retry budget was spent.

    `retryable` defaults to True; the raiser clears it for failures another
    attempt cannot fix (4xx responses, local file errors). `part` is the
    1-based (number, count) of a multipart upload part, since part URLs often
    differ only in their redacted query string.
    """

    reason = "TransferFailed"
    retryable = True

    def __init__(
        self,
        method: str,
        url: str,
        status: int | None = None,
        detail: str | None = None,
        *,
        part: tuple[int, int] | None = None,
        **kwargs: Any,
    ) -> None:
        action = f"{method} part {part[0]}/{part[1]}" if part else method
        if status is not None:
            message = f"{action} '{url}' failed with status {status}"
        else:
            message = f"{action} '{url}' failed: {detail or 'network error'}"
        super().__init__(message, **kwargs)
        self.method = method
        self.url = url
        self.status = status
        self.part = part


class DownloadFailedError(TransferFailedError):
    reason = "DownloadFailed"


class UploadFailedError(TransferFailedError):
    reason = "UploadFailed"


class InvalidCallbackError(AssetComputeError):
    """The worker callback supplied at registration is not callable."""

    reason = "InvalidCallback"


class UnsupportedPipelineModeError(AssetComputeError):
    """A rendition requires the pipeline but the worker does not support it."""

    reason = "UnsupportedPipelineMode"


class CallbackFailedError(AssetComputeError):
    """Wraps any exception raised by the caller-supplied callback."""

    reason = "CallbackFailed"
