# Rev 0.1.0
"""Error taxonomy.

- RemoteStoreError: the store rejected a call or could not be reached.
  Managers catch it, log it, notify the user and keep their last-known-good
  state.
- InvariantViolation: a command was given invalid input (blank title/name).
  Raised before any remote call; callers are expected to validate first.
- AuthenticationError: sign-in/sign-up refused.

Missing entities and unauthenticated calls are not errors: managers no-op.
"""
from __future__ import annotations


class FastodoError(Exception):
    pass


class RemoteStoreError(FastodoError):
    pass


class InvariantViolation(FastodoError, ValueError):
    pass


class AuthenticationError(FastodoError):
    pass


def require_text(value: str, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvariantViolation(f"{what} required")
    return value
