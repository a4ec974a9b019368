from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from pathlib import Path
from typing import List

import pytest

from taxcalc.adapters.api_errors import ApiClientError
from taxcalc.adapters.storage_local import StorageLocal
from taxcalc.adapters.tax_rest import TaxRestAdapter
from taxcalc.domain.models import CalculationResult, HealthStatus, HistoryEntry
from taxcalc.web_ui.runtime import WebRuntime, _rest_adapter_factory


class _PortDouble:
    def __init__(self) -> None:
        self.closed = False
        self.calculate_calls = 0

    def health(self) -> HealthStatus:
        return HealthStatus(status="healthy", vault="healthy", database="healthy")

    def list_history(self) -> List[HistoryEntry]:
        return [
            HistoryEntry(
                id="h1",
                timestamp="2024-05-01T10:15:00Z",
                income=Decimal("20000"),
                income_tax=Decimal("1486"),
                national_insurance_contribution=Decimal("891.6"),
                take_home=Decimal("17622.4"),
            )
        ]

    def calculate(self, request) -> CalculationResult:
        self.calculate_calls += 1
        return _result("c1")

    def get_calculation(self, calculation_id: str) -> CalculationResult:
        if calculation_id == "missing":
            raise ApiClientError("ctx", status=404, hint="Calculation not found")
        return _result(calculation_id)

    def close(self) -> None:
        self.closed = True


def _result(calculation_id: str) -> CalculationResult:
    return CalculationResult(
        id=calculation_id,
        income=Decimal("50000"),
        income_tax=Decimal("7486"),
        national_insurance_contribution=Decimal("2994.4"),
        take_home=Decimal("39519.6"),
        effective_rate=Decimal("20.96"),
        encrypted_ni="enc",
    )


class _ClientDouble:
    def __init__(self) -> None:
        self.delete_handlers = []
        self.disconnect_handlers = []

    def on_delete(self, handler) -> None:
        self.delete_handlers.append(handler)

    def on_disconnect(self, handler) -> None:
        self.disconnect_handlers.append(handler)


async def _inline_io(func, *args):
    return func(*args)


@pytest.fixture(autouse=True)
def _clear_log_env(monkeypatch) -> None:
    for var in ("TAXCALC_LOG_LEVEL", "TAXCALC_DEBUG", "TAXCALC_DEBUG_LOGGING"):
        monkeypatch.delenv(var, raising=False)


def _runtime(tmp_path: Path, environ=None, ports=None) -> WebRuntime:
    created = ports if ports is not None else []

    def factory(settings_vm):
        port = _PortDouble()
        created.append(port)
        return port

    return WebRuntime(
        storage=StorageLocal(root_dir=str(tmp_path)),
        environ=environ or {},
        port_factory=factory,
    )


def test_saved_settings_load_then_env_overrides(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text(
        json.dumps({"api_base_url": "http://saved.example", "history_limit": 5}),
        encoding="utf-8",
    )

    runtime = _runtime(tmp_path, environ={"TAXCALC_API_BASE_URL": "https://env.example"})

    assert runtime.settings_vm.api_base_url == "https://env.example"
    assert runtime.settings_vm.config.history_limit == 5


def test_corrupt_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text("[1, 2]", encoding="utf-8")

    runtime = _runtime(tmp_path)

    assert runtime.settings_payload()["api_base_url"] == "http://localhost:8080"


def test_apply_settings_persists_and_rebuilds_port(tmp_path: Path) -> None:
    ports: List[_PortDouble] = []
    runtime = _runtime(tmp_path, ports=ports)
    first = runtime.ensure_port()

    runtime.apply_settings_payload({"api_base_url": "https://tax.example"})

    assert first.closed
    assert runtime.ensure_port() is not first
    assert len(ports) == 2
    saved = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert saved["api_base_url"] == "https://tax.example"


def test_new_session_mount_notifies_listeners(tmp_path: Path) -> None:
    runtime = _runtime(tmp_path)
    session = runtime.new_session(run_io=_inline_io)
    seen = []
    session.listeners.append(seen.append)

    asyncio.run(session.refresh())

    assert seen
    assert session.vm.health_badge() is not None
    assert [row.calculation_id for row in session.vm.history_rows()] == ["h1"]


def test_open_detail_failure_sets_status_message(tmp_path: Path) -> None:
    runtime = _runtime(tmp_path)
    session = runtime.new_session(run_io=_inline_io)

    asyncio.run(session.open_detail("missing"))

    assert session.status_message == "Failed to load calculation: Calculation not found"
    assert session.vm.detail_card() is None


def test_closed_session_ignores_updates(tmp_path: Path) -> None:
    runtime = _runtime(tmp_path)
    session = runtime.new_session(run_io=_inline_io)
    seen = []
    session.listeners.append(seen.append)

    session.close()
    asyncio.run(session.refresh())

    assert seen == []
    assert session.vm.history_empty


def test_rest_factory_uses_settings(tmp_path: Path) -> None:
    runtime = WebRuntime(storage=StorageLocal(root_dir=str(tmp_path)), environ={})
    runtime.apply_settings_payload(
        {"api_base_url": "https://tax.example", "api_prefix": "v1", "api_key": "k"},
        persist=False,
    )

    adapter = _rest_adapter_factory(runtime.settings_vm)
    try:
        assert isinstance(adapter, TaxRestAdapter)
        assert adapter.api_prefix == "/v1"
        assert adapter.session._headers()["X-API-Key"] == "k"
    finally:
        adapter.close()
    assert not (tmp_path / "settings.json").exists()


def test_successful_detail_after_failure_renders_without_stale_message(tmp_path: Path) -> None:
    runtime = _runtime(tmp_path)
    session = runtime.new_session(run_io=_inline_io)
    seen: List[str] = []
    session.listeners.append(lambda state: seen.append(session.status_message))

    asyncio.run(session.open_detail("missing"))
    assert seen[-1] == "Failed to load calculation: Calculation not found"

    asyncio.run(session.open_detail("c7"))

    assert seen[-1] == ""
    assert session.vm.detail_card().calculation_id == "c7"


def test_page_session_survives_websocket_drop(tmp_path: Path) -> None:
    ports: List[_PortDouble] = []
    runtime = _runtime(tmp_path, ports=ports)
    session = runtime.new_session(run_io=_inline_io)
    client = _ClientDouble()

    session.bind_client(client)
    for handler in client.disconnect_handlers:
        handler()

    coordinator = session.coordinator
    coordinator.set_input("income", "50000")
    coordinator.set_input("national_insurance", "AB123456C")

    async def submit_and_settle() -> bool:
        applied = await coordinator.submit()
        await coordinator.wait_idle()
        return applied

    assert asyncio.run(submit_and_settle()) is True
    assert ports[0].calculate_calls == 1
    assert session.vm.result_card().calculation_id == "c1"
    assert not coordinator.closed


def test_page_delete_closes_session(tmp_path: Path) -> None:
    runtime = _runtime(tmp_path)
    session = runtime.new_session(run_io=_inline_io)
    client = _ClientDouble()
    session.bind_client(client)

    assert len(client.delete_handlers) == 1
    client.delete_handlers[0]()

    assert session.coordinator.closed
    assert session.listeners == []


def test_saved_settings_never_contain_api_key(tmp_path: Path) -> None:
    runtime = _runtime(tmp_path)

    runtime.apply_settings_payload({"api_base_url": "https://tax.example", "api_key": "secret"})

    saved = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert "api_key" not in saved
    assert saved["api_base_url"] == "https://tax.example"
    assert runtime.settings_vm.config.api_key == "secret"
