"""Custom exception hierarchy for pysofar."""

from __future__ import annotations


class SofarError(Exception):
    """Base exception for all pysofar errors."""


class SofarConfigError(SofarError):
    """Invalid or missing configuration."""


class SofarTransportError(SofarError):
    """HTTP-level failure (network, timeout, non-200, invalid JSON)."""

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


class SofarApiError(SofarError):
    """API answered with an unexpected code or body shape."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class SofarAuthenticationError(SofarApiError):
    """Login rejected or login response missing the access token."""


class SofarFetchError(SofarApiError):
    """Station list or station detail could not be retrieved."""


class SofarStoreWriteError(SofarError):
    """A container, leaf, or value could not be written to the state tree."""

    def __init__(self, message: str, *, object_id: str = "") -> None:
        self.object_id = object_id
        super().__init__(message)


class SofarPublishError(SofarError):
    """A message could not be handed to the MQTT broker."""

    def __init__(self, message: str, *, topic: str = "") -> None:
        self.topic = topic
        super().__init__(message)


class SofarSnapshotError(SofarError):
    """The JSON snapshot could not be written to local storage."""
