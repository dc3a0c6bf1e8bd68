"""Custom exception hierarchy for fleetlink."""

from __future__ import annotations

from collections.abc import Sequence


class FleetError(Exception):
    """Base exception for all fleetlink errors."""


class FleetConfigError(FleetError):
    """Invalid or missing configuration."""


class NetworkUnavailableError(FleetError):
    """The platform connectivity provider reports the device offline."""


class BackendUnreachableError(FleetError):
    """Every backend discovery candidate failed to answer its health check."""

    def __init__(self, message: str, *, candidates: Sequence[str] = ()) -> None:
        self.candidates = tuple(candidates)
        super().__init__(message)


class FetchFailedError(FleetError):
    """A remote call failed after a backend address was obtained.

    ``status_code`` is ``None`` for connection-level failures (refused,
    timed out, reset) where no HTTP response was received.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
