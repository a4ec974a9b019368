"""NiceGUI entrypoint for the tax calculator web UI."""

from __future__ import annotations

import argparse

from nicegui import Client, app, background_tasks, run, ui

from taxcalc.utils.logging import configure_root
from taxcalc.web_ui.runtime import CalculatorSession, WebRuntime


def _install_theme() -> None:
    """Install global CSS tokens for the calculator page."""
    ui.add_head_html(
        """
<style>
:root {
  --tax-card: rgba(255, 255, 255, 0.9);
  --tax-border: #c9d7e9;
  --tax-positive: #0b8f5c;
  --tax-negative: #b42318;
}
.tax-page { max-width: 1200px; margin: 0 auto; padding: 14px; }
.tax-card { background: var(--tax-card); border: 1px solid var(--tax-border); border-radius: 14px; }
.tax-mono { font-family: monospace; }
.tax-positive { color: var(--tax-positive); }
.tax-negative { color: var(--tax-negative); }
</style>
        """
    )


def _build_ui(runtime: WebRuntime) -> None:
    """Register the NiceGUI pages for the runtime."""

    @ui.page("/")
    async def index(client: Client) -> None:
        session: CalculatorSession = runtime.new_session(run_io=run.io_bound)
        coordinator = session.coordinator
        vm = session.vm

        @ui.refreshable
        def render_header() -> None:
            with ui.row().classes("w-full justify-between items-center tax-card p-3"):
                with ui.column():
                    ui.label("UK Tax Calculator").classes("text-h5")
                    ui.label("HMRC-style tax calculation demo").classes("text-caption")
                badge = vm.health_badge()
                if badge is not None:
                    color = "positive" if badge.healthy else "negative"
                    with ui.row().classes("q-gutter-sm"):
                        ui.badge(f"Vault: {badge.vault}", color=color)
                        ui.badge(f"Database: {badge.database}", color=color)
                ui.button(icon="refresh", on_click=refresh).props("flat dense")

        @ui.refreshable
        def render_submit() -> None:
            button = ui.button(vm.submit_label, on_click=submit, color="primary")
            if not vm.can_submit:
                button.props("disable loading")
            if vm.error_text:
                ui.label(vm.error_text).classes("tax-negative")

        @ui.refreshable
        def render_result() -> None:
            card = vm.result_card()
            if card is None:
                return
            with ui.card().classes("tax-card w-full"):
                ui.label("Tax Calculation Result").classes("text-subtitle1")
                with ui.grid(columns=2):
                    ui.label("Gross Income:")
                    ui.label(card.gross_income)
                    ui.label("Income Tax:")
                    ui.label(card.income_tax).classes("tax-negative")
                    ui.label("National Insurance:")
                    ui.label(card.national_insurance).classes("tax-negative")
                    ui.label("Take Home Pay:")
                    ui.label(card.take_home).classes("tax-positive text-bold")
                    ui.label("Effective Tax Rate:")
                    ui.label(card.effective_rate)
                ui.separator()
                ui.label(f"Calculation ID: {card.calculation_id}").classes("tax-mono text-caption")
                ui.label(f"Encrypted NI: {card.encrypted_ni}").classes("tax-mono text-caption")

        @ui.refreshable
        def render_history() -> None:
            ui.label("Calculation History").classes("text-h6")
            ui.label(f"Recent calculations (showing last {vm.history_limit})").classes("text-caption")
            if session.status_message:
                ui.label(session.status_message).classes("tax-negative text-caption")
            if vm.history_empty:
                ui.label("No calculations yet. Try calculating your tax above!")
                return
            for row in vm.history_rows():
                with ui.card().classes("tax-card w-full q-pa-sm"):
                    with ui.row().classes("w-full justify-between"):
                        ui.label(row.income).classes("text-bold")
                        ui.label(row.date).classes("text-caption")
                    with ui.row().classes("q-gutter-md"):
                        ui.label(f"Tax: {row.income_tax}")
                        ui.label(f"NI: {row.national_insurance}")
                        ui.label(f"Take home: {row.take_home}").classes("tax-positive")
                    with ui.row().classes("w-full justify-between items-center"):
                        ui.label(f"Encrypted NI: {row.encrypted_ni}").classes("tax-mono text-caption")
                        ui.button(
                            "Details",
                            on_click=lambda _, cid=row.calculation_id: open_detail(cid),
                        ).props("flat dense")

        @ui.refreshable
        def render_detail() -> None:
            card = vm.detail_card()
            if card is None:
                return
            with ui.dialog(value=True).on("hide", coordinator.close_detail), ui.card():
                ui.label(f"Calculation {card.calculation_id}").classes("text-subtitle1")
                ui.label(f"Gross income: {card.gross_income}")
                ui.label(f"Income tax: {card.income_tax}")
                ui.label(f"National insurance: {card.national_insurance}")
                ui.label(f"Take home: {card.take_home}")
                ui.label(f"Effective rate: {card.effective_rate}")
                ui.label(card.encrypted_ni).classes("tax-mono text-caption")
                ui.button("Close", on_click=coordinator.close_detail)

        def refresh_all(_state=None) -> None:
            render_header.refresh()
            render_submit.refresh()
            render_result.refresh()
            render_history.refresh()
            render_detail.refresh()

        async def submit() -> None:
            await coordinator.submit()

        async def refresh() -> None:
            await session.refresh()

        async def open_detail(calculation_id: str) -> None:
            await session.open_detail(calculation_id)

        session.listeners.append(refresh_all)

        with ui.column().classes("tax-page w-full"):
            render_header()
            with ui.row().classes("w-full no-wrap q-gutter-md items-start"):
                with ui.card().classes("tax-card col"):
                    ui.label("Calculate Your Tax").classes("text-h6")
                    ui.number(
                        "Annual Income (£)",
                        placeholder="e.g., 50000",
                        min=0,
                        step=0.01,
                        on_change=lambda e: coordinator.set_input(
                            "income", "" if e.value is None else e.value
                        ),
                    ).classes("w-full")
                    ui.input(
                        "National Insurance Number",
                        placeholder="e.g., AB123456C",
                        validation=vm.ni_hint,
                        on_change=lambda e: coordinator.set_input("national_insurance", e.value),
                    ).classes("w-full")
                    ui.label("Encrypted at rest by the tax service").classes("text-caption")
                    render_submit()
                    render_result()
                with ui.column().classes("col"):
                    render_history()
            render_detail()

        session.bind_client(client)
        await client.connected()
        background_tasks.create(session.refresh(), name="taxcalc-mount")


def _parse_args() -> argparse.Namespace:
    """Parse CLI args for web runtime startup."""
    parser = argparse.ArgumentParser(description="Run the tax calculator NiceGUI web UI.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument("--api-base-url", default=None, help="Tax service base URL.")
    parser.add_argument("--reload", action="store_true")
    parser.add_argument("--smoke-test", action="store_true")
    return parser.parse_args()


def main() -> None:
    """CLI entrypoint for the NiceGUI runtime."""
    args = _parse_args()
    configure_root()
    runtime = WebRuntime()
    if args.api_base_url:
        runtime.apply_settings_payload({"api_base_url": args.api_base_url}, persist=False)
    if args.smoke_test:
        payload = runtime.settings_payload()
        print("web-smoke-ok", payload.get("api_base_url"))
        return
    _install_theme()
    _build_ui(runtime)
    app.on_shutdown(runtime.shutdown)
    ui.run(
        host=args.host,
        port=args.port,
        title="UK Tax Calculator",
        reload=args.reload,
        show=False,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
