"""
identity_service.services.results

Typed result values for expected business outcomes.

Responsibilities:
- `Success` / `Failure` variants returned instead of raising for outcomes such as
  bad credentials or a duplicate login.
- Failure kinds for authentication and registration.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T
    ok: Literal[True] = True


@dataclass(frozen=True, slots=True)
class Failure(Generic[E]):
    error: E
    ok: Literal[False] = False


Result = Success[T] | Failure[E]


class AuthFailure(enum.StrEnum):
    # Deliberately a single kind: unknown login and wrong secret are indistinguishable.
    bad_credentials = "BAD_CREDENTIALS"


class RegistrationFailure(enum.StrEnum):
    invalid_email = "INVALID_EMAIL"
    duplicate_login = "DUPLICATE_LOGIN"
    duplicate_email = "DUPLICATE_EMAIL"
