"""Aggregate client state and the event transitions that produce it.

``AppState`` is immutable; every change goes through ``reduce`` with one of the
event types below, so a half-applied update (for example ``loading`` cleared
before the error is set) can never be observed.

Submissions are tagged with a generation number. ``SubmitStarted`` adopts the
new generation and completions carrying any other number are dropped, which
keeps a slow, superseded response from overwriting a newer result.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal, Optional, Tuple, Union

from taxcalc.domain.models import CalculationResult, HealthStatus, HistoryEntry

FormField = Literal["income", "national_insurance"]


@dataclass(frozen=True)
class AppState:
    income_input: str = ""
    ni_input: str = ""
    result: Optional[CalculationResult] = None
    history: Tuple[HistoryEntry, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    health: Optional[HealthStatus] = None
    generation: int = 0
    detail: Optional[CalculationResult] = None

    @property
    def can_submit(self) -> bool:
        return not self.loading

    def next_generation(self) -> int:
        return self.generation + 1


# ---- Events ----
@dataclass(frozen=True)
class InputChanged:
    field: FormField
    value: str


@dataclass(frozen=True)
class SubmitStarted:
    generation: int


@dataclass(frozen=True)
class SubmitSucceeded:
    generation: int
    result: CalculationResult


@dataclass(frozen=True)
class SubmitFailed:
    generation: int
    message: str


@dataclass(frozen=True)
class HistoryLoaded:
    entries: Tuple[HistoryEntry, ...]


@dataclass(frozen=True)
class HealthLoaded:
    health: HealthStatus


@dataclass(frozen=True)
class DetailLoaded:
    result: Optional[CalculationResult]


Event = Union[
    InputChanged,
    SubmitStarted,
    SubmitSucceeded,
    SubmitFailed,
    HistoryLoaded,
    HealthLoaded,
    DetailLoaded,
]


def is_stale(state: AppState, event: Event) -> bool:
    """Return whether a submission completion belongs to a superseded generation."""
    if isinstance(event, (SubmitSucceeded, SubmitFailed)):
        return event.generation != state.generation
    return False


def reduce(state: AppState, event: Event) -> AppState:
    """Apply one event and return the next state (``state`` itself when ignored)."""
    if isinstance(event, InputChanged):
        if event.field == "income":
            return replace(state, income_input=event.value)
        if event.field == "national_insurance":
            return replace(state, ni_input=event.value)
        raise ValueError(f"Unknown form field '{event.field}'")
    if isinstance(event, SubmitStarted):
        return replace(
            state,
            loading=True,
            error=None,
            result=None,
            generation=event.generation,
        )
    if isinstance(event, SubmitSucceeded):
        if is_stale(state, event):
            return state
        return replace(state, loading=False, error=None, result=event.result)
    if isinstance(event, SubmitFailed):
        if is_stale(state, event):
            return state
        return replace(state, loading=False, error=event.message)
    if isinstance(event, HistoryLoaded):
        return replace(state, history=tuple(event.entries))
    if isinstance(event, HealthLoaded):
        return replace(state, health=event.health)
    if isinstance(event, DetailLoaded):
        return replace(state, detail=event.result)
    raise TypeError(f"Unhandled event: {event!r}")


__all__ = [
    "AppState",
    "DetailLoaded",
    "Event",
    "FormField",
    "HealthLoaded",
    "HistoryLoaded",
    "InputChanged",
    "SubmitFailed",
    "SubmitStarted",
    "SubmitSucceeded",
    "is_stale",
    "reduce",
]
