"""Failure taxonomy shared by the intake, gateway and HTTP layers."""

from __future__ import annotations


class RemovalError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(RemovalError):
    """Caller session is missing or invalid."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class BadInput(RemovalError):
    """No usable image source was supplied."""

    status_code = 400


class Misconfigured(RemovalError):
    """The provider credential is absent. A deployment fault, not a client one."""

    status_code = 500


class ProviderError(RemovalError):
    """The remove.bg call failed: transport, rejection or malformed response."""

    status_code = 500
