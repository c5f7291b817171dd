"""Tests for the in-memory collaborators."""

import asyncio
from datetime import datetime, timezone

import pytest

from cashflow_core.exceptions import AuthenticationError, PersistenceError
from cashflow_session.interfaces import AuthEvent, DocumentStore, IdentityProvider
from cashflow_session.memory import InMemoryDocumentStore, InMemoryIdentityProvider


class TestInMemoryIdentityProvider:
    """Test suite for InMemoryIdentityProvider."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryIdentityProvider(), IdentityProvider)

    def test_sign_up_then_sign_in(self):
        async def scenario():
            identity = InMemoryIdentityProvider()
            created = await identity.sign_up("Me@Example.com", "secret")
            session = await identity.sign_in("me@example.com", "secret")
            return created, session, await identity.current_session()

        created, session, current = asyncio.run(scenario())

        assert created is None
        assert session.email == "me@example.com"
        assert current == session

    def test_duplicate_sign_up(self):
        async def scenario():
            identity = InMemoryIdentityProvider()
            await identity.sign_up("me@example.com", "secret")
            await identity.sign_up("me@example.com", "other")

        with pytest.raises(AuthenticationError, match="User already registered"):
            asyncio.run(scenario())

    def test_missing_credentials(self):
        with pytest.raises(AuthenticationError, match="Email and password are required"):
            asyncio.run(InMemoryIdentityProvider().sign_up("", "secret"))

    def test_wrong_password(self):
        async def scenario():
            identity = InMemoryIdentityProvider()
            await identity.sign_up("me@example.com", "secret")
            await identity.sign_in("me@example.com", "guess")

        with pytest.raises(AuthenticationError) as exc_info:
            asyncio.run(scenario())
        assert exc_info.value.message == "Invalid login credentials"
        assert exc_info.value.operation == "sign_in"

    def test_subscribers_notified(self):
        events = []

        async def scenario():
            identity = InMemoryIdentityProvider()
            unsubscribe = identity.subscribe(lambda event, user: events.append(event))
            await identity.sign_up("me@example.com", "secret")
            await identity.sign_in("me@example.com", "secret")
            await identity.sign_out()
            unsubscribe()
            await identity.sign_in("me@example.com", "secret")

        asyncio.run(scenario())

        assert events == [AuthEvent.SIGNED_IN, AuthEvent.SIGNED_OUT]


class TestInMemoryDocumentStore:
    """Test suite for InMemoryDocumentStore."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryDocumentStore(), DocumentStore)

    def test_upsert_and_get(self):
        store = InMemoryDocumentStore()
        now = datetime.now(timezone.utc)

        async def scenario():
            assert await store.get("u1") is None
            await store.upsert("u1", {"month": "2026-01"}, now)
            await store.upsert("u1", {"month": "2026-02"}, now)
            return await store.get("u1")

        assert asyncio.run(scenario()) == {"month": "2026-02"}
        assert store.write_count == 2
        assert store.updated_at["u1"] == now

    def test_documents_are_copied(self):
        store = InMemoryDocumentStore()
        document = {"cashflow": {"needs": []}}

        async def scenario():
            await store.upsert("u1", document, datetime.now(timezone.utc))
            document["cashflow"]["needs"].append({"id": "x"})
            loaded = await store.get("u1")
            loaded["month"] = "2030-01"
            return await store.get("u1")

        assert asyncio.run(scenario()) == {"cashflow": {"needs": []}}

    def test_simulated_failures(self):
        store = InMemoryDocumentStore()
        store.fail_reads = True
        store.fail_writes = True

        with pytest.raises(PersistenceError) as exc_info:
            asyncio.run(store.get("u1"))
        assert exc_info.value.operation == "get"

        with pytest.raises(PersistenceError):
            asyncio.run(store.upsert("u1", {}, datetime.now(timezone.utc)))
