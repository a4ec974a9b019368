"""Coordinator owning the client session state without UI concerns."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

from taxcalc.domain.app_state import (
    AppState,
    DetailLoaded,
    Event,
    FormField,
    HealthLoaded,
    HistoryLoaded,
    InputChanged,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    is_stale,
    reduce,
)
from taxcalc.domain.models import CalculationResult
from taxcalc.domain.ports import UseCaseError
from taxcalc.usecases.check_health import CheckHealth
from taxcalc.usecases.fetch_calculation import FetchCalculation
from taxcalc.usecases.submit_calculation import CALCULATION_FAILED_MESSAGE, SubmitCalculation
from taxcalc.usecases.sync_history import SyncHistory

LOGGER = logging.getLogger(__name__)

RunIo = Callable[..., Awaitable[Any]]
StateListener = Callable[[AppState], None]


def _noop(*_: object, **__: object) -> None:
    """Default no-op state listener."""


class SessionCoordinator:
    """Sequences health, history, and submission flows for one page session.

    All state changes happen on the event loop through ``dispatch``. Blocking
    use cases are awaited through ``run_io`` (``asyncio.to_thread`` unless the
    host supplies its own, e.g. ``nicegui.run.io_bound``).
    """

    def __init__(
        self,
        uc_health: CheckHealth,
        uc_history: SyncHistory,
        uc_submit: SubmitCalculation,
        uc_fetch: Optional[FetchCalculation] = None,
        *,
        run_io: Optional[RunIo] = None,
        on_change: Optional[StateListener] = None,
        state: Optional[AppState] = None,
    ) -> None:
        self.uc_health = uc_health
        self.uc_history = uc_history
        self.uc_submit = uc_submit
        self.uc_fetch = uc_fetch
        self._run_io: RunIo = run_io or asyncio.to_thread
        self._on_change: StateListener = on_change or _noop
        self._state = state or AppState()
        self._background: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Mark the owning view as gone; completions arriving later are dropped."""
        self._closed = True

    def dispatch(self, event: Event) -> bool:
        """Apply ``event`` and notify the listener. Returns whether state changed."""
        if self._closed:
            LOGGER.debug("Dropping %s: session closed", type(event).__name__)
            return False
        if is_stale(self._state, event):
            LOGGER.debug(
                "Dropping %s for superseded submission %s",
                type(event).__name__,
                getattr(event, "generation", "?"),
            )
            return False
        next_state = reduce(self._state, event)
        if next_state is self._state:
            return False
        self._state = next_state
        self._on_change(next_state)
        return True

    def set_input(self, field: FormField, value: Any) -> None:
        self.dispatch(InputChanged(field, "" if value is None else str(value)))

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------
    async def mount(self) -> None:
        """Run the startup health check and history sync independently."""
        await asyncio.gather(self.check_health(), self.sync_history())

    async def check_health(self) -> None:
        try:
            health = await self._run_io(self.uc_health)
        except UseCaseError as exc:
            LOGGER.warning("Health check failed (%s): %s", exc.code, exc.message)
            return
        except Exception:
            LOGGER.exception("Health check failed unexpectedly")
            return
        self.dispatch(HealthLoaded(health))

    async def sync_history(self) -> None:
        try:
            entries = await self._run_io(self.uc_history)
        except UseCaseError as exc:
            LOGGER.warning("Failed to fetch history (%s): %s", exc.code, exc.message)
            return
        except Exception:
            LOGGER.exception("History fetch failed unexpectedly")
            return
        self.dispatch(HistoryLoaded(tuple(entries)))

    async def submit(self) -> bool:
        """Validate the current form inputs and submit one calculation.

        Returns:
            bool: ``True`` when a result was applied to the session state.
        """
        if self._closed:
            return False
        state = self._state
        if not state.can_submit:
            LOGGER.info("Submission ignored: a calculation is already in flight")
            return False

        generation = state.next_generation()
        self.dispatch(SubmitStarted(generation))
        try:
            request = self.uc_submit.prepare(state.income_input, state.ni_input)
            result: CalculationResult = await self._run_io(self.uc_submit, request)
        except UseCaseError as exc:
            LOGGER.warning("Calculation failed (%s): %s", exc.code, exc.message)
            self.dispatch(SubmitFailed(generation, exc.message))
            return False
        except Exception:
            LOGGER.exception("Calculation failed unexpectedly")
            self.dispatch(SubmitFailed(generation, CALCULATION_FAILED_MESSAGE))
            return False

        applied = self.dispatch(SubmitSucceeded(generation, result))
        if applied:
            # Not awaited: the result is already on screen when history lands.
            self._spawn(self.sync_history())
        return applied

    async def open_detail(self, calculation_id: str) -> CalculationResult:
        """Load one stored calculation into ``state.detail``.

        Raises:
            UseCaseError: When no fetch use case is wired or the lookup fails.
        """
        if self.uc_fetch is None:
            raise UseCaseError("NOT_SUPPORTED", "Calculation details are not available.")
        result: CalculationResult = await self._run_io(self.uc_fetch, calculation_id)
        self.dispatch(DetailLoaded(result))
        return result

    def close_detail(self) -> None:
        self.dispatch(DetailLoaded(None))

    async def wait_idle(self) -> None:
        """Await background work spawned by earlier flows (tests, shutdown)."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)


__all__ = ["RunIo", "SessionCoordinator", "StateListener"]
