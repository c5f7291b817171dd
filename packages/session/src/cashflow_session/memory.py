"""In-memory collaborators.

Fakes for the identity provider and document store, used by the tests and
for running the session layer without any hosted services.
"""

import copy
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

import structlog

from cashflow_core.exceptions import AuthenticationError, PersistenceError

from .interfaces import AuthEvent, AuthListener, Unsubscribe, UserSession

logger = structlog.get_logger()


class InMemoryIdentityProvider:
    """Email/password accounts held in a dict."""

    def __init__(self):
        self._accounts: dict[str, tuple[str, str]] = {}
        self._session: Optional[UserSession] = None
        self._listeners: list[AuthListener] = []

    def _notify(self, event: AuthEvent, session: Optional[UserSession]) -> None:
        for listener in list(self._listeners):
            listener(event, session)

    async def sign_up(self, email: str, password: str) -> Optional[UserSession]:
        email = email.strip().lower()
        if not email or not password:
            raise AuthenticationError("Email and password are required", operation="sign_up")
        if email in self._accounts:
            raise AuthenticationError("User already registered", operation="sign_up")
        self._accounts[email] = (uuid4().hex, password)
        logger.info("account_created", email=email)
        return None

    async def sign_in(self, email: str, password: str) -> UserSession:
        email = email.strip().lower()
        account = self._accounts.get(email)
        if account is None or account[1] != password:
            raise AuthenticationError("Invalid login credentials", operation="sign_in")
        self._session = UserSession(user_id=account[0], email=email)
        self._notify(AuthEvent.SIGNED_IN, self._session)
        return self._session

    async def sign_out(self) -> None:
        self._session = None
        self._notify(AuthEvent.SIGNED_OUT, None)

    async def current_session(self) -> Optional[UserSession]:
        return self._session

    def subscribe(self, listener: AuthListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class InMemoryDocumentStore:
    """Documents keyed by user id.

    ``fail_reads`` and ``fail_writes`` simulate an unavailable backend.
    """

    def __init__(self):
        self.documents: dict[str, dict[str, Any]] = {}
        self.updated_at: dict[str, datetime] = {}
        self.write_count = 0
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, user_id: str) -> Optional[dict[str, Any]]:
        if self.fail_reads:
            raise PersistenceError("Store unavailable", user_id=user_id, operation="get")
        document = self.documents.get(user_id)
        return copy.deepcopy(document) if document is not None else None

    async def upsert(self, user_id: str, document: dict[str, Any], timestamp: datetime) -> None:
        if self.fail_writes:
            raise PersistenceError("Store unavailable", user_id=user_id, operation="upsert")
        self.documents[user_id] = copy.deepcopy(document)
        self.updated_at[user_id] = timestamp
        self.write_count += 1


__all__ = ["InMemoryIdentityProvider", "InMemoryDocumentStore"]
