"""Exception hierarchy for proxyswitch."""

from __future__ import annotations

from enum import StrEnum


class ProxySwitchError(Exception):
    """Base class for all proxyswitch errors."""


class ConfigError(ProxySwitchError):
    """Configuration could not be loaded or failed validation."""


class DirectoryErrorKind(StrEnum):
    UNREACHABLE = "unreachable"
    BAD_STATUS = "bad_status"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"


class DirectoryError(ProxySwitchError):
    """
    A request to the proxy directory failed.

    ``kind`` classifies the failure; ``status_code`` and ``body`` are only
    populated for ``BAD_STATUS``.  ``str(err)`` is shown verbatim to the user.
    """

    def __init__(
        self,
        kind: DirectoryErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.body = body

    @classmethod
    def bad_status(cls, status_code: int, body: str) -> DirectoryError:
        return cls(
            DirectoryErrorKind.BAD_STATUS,
            f"unexpected status code {status_code}: {body}",
            status_code=status_code,
            body=body,
        )

    def __repr__(self) -> str:
        return f"DirectoryError({self.kind.value}, {str(self)!r})"
