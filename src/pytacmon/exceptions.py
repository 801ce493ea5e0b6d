"""Custom exception hierarchy for pytacmon."""

from __future__ import annotations

from typing import Any


class TacmonError(Exception):
    """Base exception for all pytacmon errors."""


class TacmonConfigError(TacmonError):
    """Invalid or missing configuration (e.g. a non-positive alert radius)."""


class TacmonValidationError(TacmonError):
    """A raw snapshot record failed validation.

    Raised at the ingestion boundary and caught during reconciliation,
    where the record is skipped and counted instead of aborting the cycle.
    """

    def __init__(self, message: str, *, record: Any = None) -> None:
        self.record = record
        super().__init__(message)


class TacmonFetchError(TacmonError):
    """Snapshot source failure (network, non-200, invalid JSON, bad shape)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)
