"""
identity_service.services.errors

Service faults.

Responsibilities:
- Exceptions for conditions that abort a workflow (identity conflicts, missing
  provider attributes, unbacked role names, identity provider outages).
- Carry an HTTP status and a client-safe message for the boundary translator
  (`identity_service.api.error_handling`).
"""

from __future__ import annotations


class ServiceError(Exception):
    status_code: int = 500
    message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, *, detail: str | None = None) -> None:
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)


class IdentityConflict(ServiceError):
    """The asserted email already belongs to a password-based account."""

    status_code = 400
    message = "User already exists"


class MissingIdentityAttribute(ServiceError):
    status_code = 400

    def __init__(self, attribute: str) -> None:
        self.attribute = attribute
        super().__init__(f"Identity provider did not assert '{attribute}'")


class UnknownRole(ServiceError):
    """A requested role name has no reference record; a data problem, not bad input."""

    status_code = 500

    def __init__(self, role_name: str) -> None:
        self.role_name = role_name
        super().__init__("There is no role with that name")


class IdentityProviderError(ServiceError):
    status_code = 502
    message = "Identity provider request failed"
