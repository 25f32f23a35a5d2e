"""
Core exceptions for the Marty control plane.

This module defines the exception hierarchy used by the watch bridging and
endpoint resolution primitives, providing clear error types for the
different failure scenarios.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Optional


class ControlPlaneError(Exception):
    """Base exception for all control plane errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary representation."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(ControlPlaneError):
    """Raised when configuration is invalid or missing."""

    pass


class NotFoundError(ControlPlaneError):
    """Raised when a requested entity cannot be found."""

    pass


class AddressesNotFoundError(NotFoundError):
    """Raised when no instance reported an address within the attempt budget."""

    def __init__(self, instance_ids: Sequence[str]) -> None:
        self.instance_ids = list(instance_ids)
        super().__init__(
            f"addresses for {self.instance_ids} not found",
            error_code="ADDRESSES_NOT_FOUND",
            details={"instance_ids": self.instance_ids},
        )


class UsernameNotFoundError(NotFoundError):
    """Raised when no username source produced a username."""

    def __init__(self) -> None:
        super().__init__("username not found", error_code="USERNAME_NOT_FOUND")


class PartialInstancesError(ControlPlaneError):
    """Raised by an instance lookup when only some requested instances exist.

    The instances that were found travel with the error so callers that can
    live with partial results do not need a second lookup.
    """

    def __init__(self, instances: Mapping[str, Any], missing: Sequence[str] = ()) -> None:
        self.instances = dict(instances)
        self.missing = list(missing)
        super().__init__(
            "only some instances were found",
            error_code="PARTIAL_INSTANCES",
            details={"missing": self.missing},
        )


class NoInstancesError(ControlPlaneError):
    """Raised by an instance lookup when none of the requested instances exist."""

    def __init__(self, instance_ids: Sequence[str] = ()) -> None:
        self.instance_ids = list(instance_ids)
        super().__init__(
            "no instances found",
            error_code="NO_INSTANCES",
            details={"instance_ids": self.instance_ids},
        )


class APIError(ControlPlaneError):
    """Raised when a facade call returns an error result."""

    pass
