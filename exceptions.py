"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations


class ConfigError(Exception):
    """
    Raised by load_config() when a required setting is missing or invalid.

    Fatal at startup: app.main() logs it and exits the process.
    """


class IpSourceError(Exception):
    """
    Raised by an IpSource when the public IP address cannot be determined.

    This may occur due to network connectivity issues, a non-2xx response,
    or a body that does not parse as an address of the expected family.
    """


class ZoneStoreError(Exception):
    """
    Base class for every failure raised by a ZoneRecordStore implementation.

    Attributes:
        operation: Short label of the failed call, e.g. "list", "create", "delete".
    """

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(message)
        self.operation = operation


class ApiError(ZoneStoreError):
    """
    The zone API answered with a non-success status.
    """

    def __init__(self, operation: str, status_code: int, body: str) -> None:
        super().__init__(
            operation,
            f"Zone API error {status_code} during {operation}: {body}",
        )
        self.status_code = status_code
        self.body = body


class MalformedResponseError(ApiError):
    """
    The zone API answered with a success status but the payload is missing
    an expected field or is not valid JSON.
    """

    def __init__(self, operation: str, status_code: int, body: str, reason: str) -> None:
        super().__init__(operation, status_code, body)
        self.reason = reason
        self.args = (f"Malformed zone API payload during {operation} ({reason}): {body}",)


class TransportError(ZoneStoreError):
    """
    The zone API could not be reached (DNS failure, refused connection, timeout).
    """

    def __init__(self, operation: str, cause: Exception) -> None:
        super().__init__(operation, f"Network error during {operation}: {cause}")
        self.cause = cause


class ZoneListError(Exception):
    """
    Listing the zone's records failed. Aborts the whole cycle.

    Wraps the underlying ZoneStoreError as __cause__ and in `error`.
    """

    def __init__(self, error: ZoneStoreError) -> None:
        super().__init__(f"Could not list zone records: {error}")
        self.error = error


class ZoneMutationError(Exception):
    """
    A single create or delete failed. Only the affected binding is deferred
    to the next cycle; the rest of the plan still executes.

    Attributes:
        step: "delete" or "create".
        error: The underlying ZoneStoreError.
    """

    def __init__(self, step: str, error: ZoneStoreError) -> None:
        super().__init__(f"{step} failed: {error}")
        self.step = step
        self.error = error
