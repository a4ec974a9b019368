"""NiceGUI runtime orchestration for the tax calculator.

This module composes settings, the REST adapter, use cases, and one
``SessionCoordinator`` per browser page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional

from taxcalc.adapters.storage_local import StorageLocal
from taxcalc.adapters.tax_rest import TaxRestAdapter
from taxcalc.domain.app_state import AppState
from taxcalc.domain.ports import TaxServicePort, UseCaseError
from taxcalc.usecases.check_health import CheckHealth
from taxcalc.usecases.fetch_calculation import FetchCalculation
from taxcalc.usecases.session_coordinator import RunIo, SessionCoordinator
from taxcalc.usecases.submit_calculation import SubmitCalculation
from taxcalc.usecases.sync_history import SyncHistory
from taxcalc.utils.logging import apply_preferences
from taxcalc.viewmodels.calculator_vm import CalculatorVM
from taxcalc.viewmodels.settings_vm import SettingsVM


LOGGER = logging.getLogger(__name__)


@dataclass
class CalculatorSession:
    """Per-page state: the coordinator plus its display projection."""

    coordinator: SessionCoordinator
    vm: CalculatorVM
    status_message: str = ""
    listeners: list = field(default_factory=list)

    def notify(self, state: AppState) -> None:
        self.vm.update(state)
        for listener in list(self.listeners):
            listener(state)

    def bind_client(self, client: Any) -> None:
        """Close the session when the page is deleted.

        Disconnect handlers also fire on a websocket drop the browser reconnects
        from, so the session must outlive them.
        """
        client.on_delete(self.close)

    async def open_detail(self, calculation_id: str) -> None:
        # Cleared first so the DetailLoaded notification renders without it.
        self.status_message = ""
        try:
            await self.coordinator.open_detail(calculation_id)
        except UseCaseError as exc:
            LOGGER.warning("Could not load calculation %s: %s", calculation_id, exc.message)
            self.status_message = exc.message
            self.notify(self.coordinator.state)

    async def refresh(self) -> None:
        await self.coordinator.mount()

    def close(self) -> None:
        self.coordinator.close()
        self.listeners.clear()


class WebRuntime:
    """Orchestration state shared by all NiceGUI pages."""

    def __init__(
        self,
        *,
        settings_vm: Optional[SettingsVM] = None,
        storage: Optional[StorageLocal] = None,
        environ: Optional[Mapping[str, str]] = None,
        port_factory: Optional[Callable[[SettingsVM], TaxServicePort]] = None,
    ) -> None:
        env = os.environ if environ is None else environ
        self.settings_vm = settings_vm or SettingsVM()
        self.storage = storage or StorageLocal(root_dir=env.get("TAXCALC_STORAGE_ROOT") or ".")
        self._port_factory = port_factory or _rest_adapter_factory
        self._port: Optional[TaxServicePort] = None

        self._load_settings_defaults()
        self.settings_vm.apply_env(env)
        apply_preferences(self.settings_vm.debug_logging)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def settings_payload(self) -> Dict[str, Any]:
        return self.settings_vm.to_dict()

    def apply_settings_payload(self, payload: Mapping[str, Any], *, persist: bool = True) -> None:
        """Validate and apply settings; the adapter is rebuilt on next use."""
        self.settings_vm.apply_dict(payload)
        if not self.settings_vm.is_valid():
            raise ValueError("Settings invalid")
        if persist:
            self.storage.save_settings(self.settings_vm.persisted_dict())
        apply_preferences(self.settings_vm.debug_logging)
        self._reset_port()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    def ensure_port(self) -> TaxServicePort:
        if self._port is None:
            self._port = self._port_factory(self.settings_vm)
            LOGGER.info("Using tax service at %s", self.settings_vm.api_base_url)
        return self._port

    def new_session(self, *, run_io: Optional[RunIo] = None) -> CalculatorSession:
        port = self.ensure_port()
        cfg = self.settings_vm.config
        vm = CalculatorVM(history_limit=cfg.history_limit)
        session: CalculatorSession

        def on_change(state: AppState) -> None:
            session.notify(state)

        coordinator = SessionCoordinator(
            CheckHealth(port),
            SyncHistory(port, limit=cfg.history_limit),
            SubmitCalculation(port, tax_year=cfg.tax_year),
            FetchCalculation(port),
            run_io=run_io,
            on_change=on_change,
        )
        session = CalculatorSession(coordinator=coordinator, vm=vm)
        return session

    def shutdown(self) -> None:
        self._reset_port()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _reset_port(self) -> None:
        port, self._port = self._port, None
        close = getattr(port, "close", None)
        if callable(close):
            close()

    def _load_settings_defaults(self) -> None:
        try:
            payload = self.storage.load_settings()
        except (OSError, ValueError) as exc:
            LOGGER.warning("Could not load local settings: %s", exc)
            return
        if not payload:
            return
        try:
            self.settings_vm.apply_dict(payload)
        except ValueError as exc:
            LOGGER.warning("Could not apply local settings: %s", exc)


def _rest_adapter_factory(settings_vm: SettingsVM) -> TaxServicePort:
    cfg = settings_vm.config
    return TaxRestAdapter(
        cfg.api_base_url,
        api_prefix=cfg.api_prefix,
        api_key=cfg.api_key or None,
        request_timeout_s=cfg.request_timeout_s,
        retries=cfg.retries,
    )


__all__ = ["CalculatorSession", "WebRuntime"]
