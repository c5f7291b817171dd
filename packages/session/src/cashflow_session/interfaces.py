"""Collaborator interfaces for the dashboard session.

The allocation core never talks to services. The session layer depends on
two collaborators, declared here as structural protocols so that any class
with matching methods can be injected (a hosted auth service, a database
table, or the in-memory fakes in ``cashflow_session.memory``).

Design Goals:
- No global client handle: collaborators are passed to DashboardSession
- Async-first: every collaborator call may do network I/O
- Failures are exceptions from ``cashflow_core.exceptions``

Example Usage:
    ```python
    class TableDocumentStore:
        async def get(self, user_id: str) -> Optional[dict[str, Any]]:
            ...

        async def upsert(self, user_id: str, document: dict[str, Any], timestamp: datetime) -> None:
            ...

    # TableDocumentStore satisfies DocumentStore without inheriting from it
    ```
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


# =============================================================================
# SESSION TYPES
# =============================================================================

class UserSession(BaseModel):
    """An authenticated user as reported by the identity provider."""

    user_id: str = Field(description="Stable opaque user identifier")
    email: str = Field(default="", description="Email or display string")


class AuthEvent(str, Enum):
    """Identity changes delivered to subscribers."""

    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"


AuthListener = Callable[[AuthEvent, Optional[UserSession]], None]
"""Callback receiving identity changes."""

Unsubscribe = Callable[[], None]
"""Stops a subscription when called."""


# =============================================================================
# IDENTITY PROVIDER
# =============================================================================

@runtime_checkable
class IdentityProvider(Protocol):
    """Contract for the sign-in service.

    Every method may raise ``AuthenticationError`` carrying a message fit to
    show the user verbatim.
    """

    async def sign_in(self, email: str, password: str) -> UserSession:
        """Authenticate with email and password and return the new session."""
        ...

    async def sign_up(self, email: str, password: str) -> Optional[UserSession]:
        """Create an account.

        Returns the session when the provider signs the user in immediately,
        None when confirmation is still required.
        """
        ...

    async def sign_out(self) -> None:
        """End the current session."""
        ...

    async def current_session(self) -> Optional[UserSession]:
        """The signed-in user, if any."""
        ...

    def subscribe(self, listener: AuthListener) -> Unsubscribe:
        """Register for sign-in/sign-out notifications."""
        ...


# =============================================================================
# DOCUMENT STORE
# =============================================================================

@runtime_checkable
class DocumentStore(Protocol):
    """Contract for per-user state persistence: one JSON document per user."""

    async def get(self, user_id: str) -> Optional[dict[str, Any]]:
        """Return the stored document, or None for a first-time user.

        Raises:
            PersistenceError: If the store cannot be read.
        """
        ...

    async def upsert(
        self,
        user_id: str,
        document: dict[str, Any],
        timestamp: datetime,
    ) -> None:
        """Insert or replace the user's document (last write wins).

        Raises:
            PersistenceError: If the write fails.
        """
        ...


__all__ = [
    "UserSession",
    "AuthEvent",
    "AuthListener",
    "Unsubscribe",
    "IdentityProvider",
    "DocumentStore",
]
