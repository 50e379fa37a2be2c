"""Domain exceptions shared by the repositories, the service and the API.

The API layer maps these to HTTP statuses:
    UserNotFoundError       → 404
    UserAlreadyExistsError  → 409
"""

from __future__ import annotations


class UserServiceError(Exception):
    """Base class for domain errors raised by user-service."""


class UserNotFoundError(UserServiceError, LookupError):
    """An id or filter matched no users. The message names the key."""


class UserAlreadyExistsError(UserServiceError):
    """The store rejected a write because the email is already taken."""

    def __init__(self, email: str) -> None:
        super().__init__(email)
        self.email = email
