"""One user's dashboard session.

DashboardSession owns the AllocationState for the signed-in user. It loads
the stored document once after sign-in, re-derives the dashboard after every
edit, and saves on a debounce: each edit restarts a short quiet period and
only the last state in a burst of edits is written.

Edits are synchronous and must be made from the event loop thread. A save
that has already started is never cancelled by later edits; the next save
waits for it. Signing out abandons any save still waiting out its quiet
period and resets state to the defaults.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

import structlog

from cashflow_core.allocation import fund_needs
from cashflow_core.dashboard import DashboardSnapshot, build_dashboard
from cashflow_core.exceptions import AuthenticationError, ConfigurationError, PersistenceError
from cashflow_core.instructions import render_instructions_text
from cashflow_core.models import (
    AllocationState,
    FundingResult,
    LinkedAccount,
    Need,
    ToolName,
    default_state,
    steps_for,
)
from cashflow_core.models.completion import StepKey
from cashflow_core.months import month_options

from .config import CashflowConfig
from .documents import dump_state, load_state
from .interfaces import AuthEvent, DocumentStore, IdentityProvider, UserSession

logger = structlog.get_logger()

T = TypeVar("T")


class SaveStatus(str, Enum):
    """Persistence status shown next to the user's email."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOADED_NEW = "loaded_new"
    SAVING = "saving"
    SAVED = "saved"
    SAVE_FAILED = "save_failed"


class DashboardSession:
    """
    Load, edit, and save one user's allocation state.

    Collaborators are injected; the session holds no global client.

    Example:
        ```python
        session = DashboardSession(identity, store)
        if await session.sign_in("me@example.com", "secret"):
            session.update_cashflow(w2_or_other_inflow="12000")
            funding = session.fund_needs()
            await session.flush()
        else:
            print(session.message)
        ```
    """

    def __init__(
        self,
        identity: IdentityProvider,
        store: DocumentStore,
        config: Optional[CashflowConfig] = None,
    ):
        if not isinstance(identity, IdentityProvider):
            raise ConfigurationError(
                "Identity provider is missing required methods",
                config_key="identity",
                expected="An IdentityProvider implementation",
                actual=type(identity).__name__,
            )
        if not isinstance(store, DocumentStore):
            raise ConfigurationError(
                "Document store is missing required methods",
                config_key="store",
                expected="A DocumentStore implementation",
                actual=type(store).__name__,
            )
        self._identity = identity
        self._store = store
        self.config = config or CashflowConfig()

        self.user: Optional[UserSession] = None
        self.state: AllocationState = self._defaults()
        self.snapshot: DashboardSnapshot = build_dashboard(self.state)
        self.status = SaveStatus.IDLE
        self.message: Optional[str] = None

        self._loaded = False
        self._generation = 0
        self._pending_save: Optional[asyncio.Task] = None
        self._in_flight: set[asyncio.Task] = set()
        self._dirty = False
        self._store_lock = asyncio.Lock()
        self._unsubscribe = identity.subscribe(self._on_auth_event)

    # =========================================================================
    # IDENTITY
    # =========================================================================

    def _defaults(self) -> AllocationState:
        state = default_state()
        state.current_month = self.config.default_month
        return state

    async def sign_in(self, email: str, password: str) -> bool:
        """Sign in and load the user's state.

        Returns:
            True on success. On failure ``message`` holds the provider's text.
        """
        self.message = None
        try:
            user = await self._identity.sign_in(email, password)
        except AuthenticationError as e:
            self.message = e.message
            logger.warning("sign_in_failed", error=e.message)
            return False
        await self._start(user)
        return True

    async def sign_up(self, email: str, password: str) -> bool:
        """Create an account, loading state if the provider signs the user in."""
        self.message = None
        try:
            user = await self._identity.sign_up(email, password)
        except AuthenticationError as e:
            self.message = e.message
            logger.warning("sign_up_failed", error=e.message)
            return False
        if user is None:
            self.message = "Account created. Sign in to continue."
            return True
        await self._start(user)
        return True

    async def resume(self) -> bool:
        """Pick up an existing provider session, if there is one."""
        try:
            user = await self._identity.current_session()
        except AuthenticationError as e:
            self.message = e.message
            return False
        if user is None:
            return False
        await self._start(user)
        return True

    async def sign_out(self) -> None:
        """End the session, abandoning any save still waiting to fire."""
        self._abandon()
        try:
            await self._identity.sign_out()
        except AuthenticationError as e:
            self.message = e.message
            logger.warning("sign_out_failed", error=e.message)

    def close(self) -> None:
        """Stop listening for identity changes."""
        self._unsubscribe()

    def _on_auth_event(self, event: AuthEvent, user: Optional[UserSession]) -> None:
        if event == AuthEvent.SIGNED_OUT and self.user is not None:
            self._abandon()

    def _abandon(self) -> None:
        if self._pending_save is not None:
            self._pending_save.cancel()
            self._pending_save = None
        self._generation += 1
        if self.user is not None:
            logger.info("session_ended", user_id=self.user.user_id)
        self.user = None
        self._loaded = False
        self._dirty = False
        self.state = self._defaults()
        self.snapshot = build_dashboard(self.state)
        self.status = SaveStatus.IDLE

    async def _start(self, user: UserSession) -> None:
        if self.user is not None and self.user.user_id != user.user_id:
            self._abandon()
        self.user = user
        self.message = None
        await self._load(user)

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    async def _load(self, user: UserSession) -> None:
        user_id = user.user_id
        generation = self._generation
        self.status = SaveStatus.LOADING

        async with self._store_lock:
            try:
                document = await self._store.get(user_id)
            except PersistenceError as e:
                logger.warning("state_read_failed", user_id=user_id, error=e.message)
                document = None

        if generation != self._generation:
            logger.info("stale_load_skipped", user_id=user_id)
            return

        if document:
            self.state = load_state(document, self._defaults())
            self.status = SaveStatus.LOADED
            logger.info("state_loaded", user_id=user_id)
        else:
            self.state = self._defaults()
            self.status = SaveStatus.LOADED_NEW
            logger.info("state_provisioned", user_id=user_id)
            await self._write(generation, new_user=True)

        self._loaded = True
        self.snapshot = build_dashboard(self.state)

    def _schedule_save(self) -> None:
        if self.user is None or not self._loaded:
            return
        self.status = SaveStatus.SAVING
        if self._pending_save is not None:
            self._pending_save.cancel()
            self._pending_save = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: keep the edit and let flush() write it.
            self._dirty = True
            return
        self._pending_save = loop.create_task(self._save_after_quiet_period(self._generation))

    async def _save_after_quiet_period(self, generation: int) -> None:
        await asyncio.sleep(self.config.persistence.save_debounce_seconds)
        # From here on the write is in flight and later edits must not cancel it.
        task = asyncio.current_task()
        if self._pending_save is task:
            self._pending_save = None
        if task is not None:
            self._in_flight.add(task)
        try:
            await self._write(generation)
        finally:
            if task is not None:
                self._in_flight.discard(task)

    async def _write(self, generation: int, *, new_user: bool = False) -> None:
        document = dump_state(self.state)
        async with self._store_lock:
            if generation != self._generation or self.user is None:
                logger.info("stale_save_skipped")
                return
            user_id = self.user.user_id
            try:
                await self._store.upsert(user_id, document, datetime.now(timezone.utc))
            except PersistenceError as e:
                self.status = SaveStatus.SAVE_FAILED
                logger.warning("state_save_failed", user_id=user_id, error=e.message)
                return
        self._dirty = False
        if not new_user:
            self.status = SaveStatus.SAVED
        logger.info("state_saved", user_id=user_id)

    async def flush(self) -> None:
        """Write pending edits now instead of waiting for the quiet period."""
        pending = self._pending_save
        if pending is not None:
            pending.cancel()
            self._pending_save = None
        if pending is not None or self._dirty:
            await self._write(self._generation)
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait for any pending or in-flight save to finish."""
        while self._pending_save is not None or self._in_flight:
            tasks = list(self._in_flight)
            if self._pending_save is not None:
                tasks.append(self._pending_save)
            await asyncio.gather(*tasks, return_exceptions=True)

    # =========================================================================
    # EDITS
    # =========================================================================

    def edit(self, mutate: Callable[[AllocationState], T]) -> T:
        """Apply ``mutate`` to the state, recompute, and schedule a save.

        ``mutate`` works on a copy that replaces the state only once it
        returns, so an exception leaves state and snapshot as they were and
        nothing is saved.
        """
        draft = self.state.model_copy(deep=True)
        result = mutate(draft)
        self.state = draft
        self.snapshot = build_dashboard(self.state)
        self._schedule_save()
        return result

    @property
    def month_choices(self) -> list[str]:
        return month_options(self.config.month_options_year)

    def set_month(self, month: str) -> None:
        self.edit(lambda s: setattr(s, "current_month", month))

    def advance_month(self) -> str:
        return self.edit(lambda s: s.advance_month())

    def set_active_tool(self, tool: ToolName) -> None:
        self.edit(lambda s: setattr(s, "active_tool", ToolName(tool)))

    def update_working_capital(self, **changes: Any) -> None:
        def apply(s: AllocationState) -> None:
            for name, value in changes.items():
                setattr(s.working_capital, name, value)

        self.edit(apply)

    def update_cashflow(self, **changes: Any) -> None:
        """Edit cash-flow inputs other than the needs ledger."""

        def apply(s: AllocationState) -> None:
            for name, value in changes.items():
                if name == "needs":
                    raise ValueError("Use the need operations to change the needs ledger")
                setattr(s.cashflow, name, value)

        self.edit(apply)

    def update_account(self, role: str, **changes: Any) -> LinkedAccount:
        def apply(s: AllocationState) -> LinkedAccount:
            account = getattr(s.accounts, role)
            for name, value in changes.items():
                setattr(account, name, value)
            return account

        return self.edit(apply)

    def apply_suggested_business_inflow(self) -> Decimal:
        return self.edit(lambda s: s.apply_suggested_business_inflow())

    def add_need(self) -> Need:
        return self.edit(lambda s: s.cashflow.add_need(s.current_month))

    def update_need(self, need_id: str, **changes: Any) -> Need:
        return self.edit(lambda s: s.cashflow.update_need(need_id, **changes))

    def mark_need_paid(self, need_id: str) -> Need:
        return self.edit(lambda s: s.cashflow.mark_paid(need_id, s.current_month))

    def reopen_need(self, need_id: str) -> Need:
        return self.edit(lambda s: s.cashflow.reopen_need(need_id))

    def remove_need(self, need_id: str) -> Need:
        return self.edit(lambda s: s.cashflow.remove_need(need_id))

    def fund_needs(self) -> FundingResult:
        """Distribute this month's needs pool, earliest due first."""
        pool = self.snapshot.cashflow.allocated_to_needs_this_month
        return self.edit(lambda s: fund_needs(s.cashflow, s.current_month, pool=pool))

    def set_step_done(self, tool: ToolName, step: StepKey, done: bool = True) -> None:
        self.edit(lambda s: s.transfer_done.set_done(s.current_month, tool, step, done))

    def toggle_step(self, tool: ToolName, step: StepKey) -> bool:
        return self.edit(lambda s: s.transfer_done.toggle(s.current_month, tool, step))

    def mark_all_steps(self, tool: ToolName) -> None:
        self.edit(lambda s: s.transfer_done.mark_all(s.current_month, tool))

    # =========================================================================
    # VIEWS
    # =========================================================================

    def steps_done(self, tool: ToolName) -> tuple[int, int]:
        """(done, total) step counts for ``tool`` in the viewed month."""
        done = self.state.transfer_done.count_done(self.state.current_month, tool)
        return done, len(steps_for(tool))

    def instructions_text(self) -> str:
        return render_instructions_text(self.snapshot.cashflow, self.state.accounts)


__all__ = ["SaveStatus", "DashboardSession"]
