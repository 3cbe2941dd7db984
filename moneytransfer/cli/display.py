"""
Rich rendering for the MoneyTransfer CLI
"""

from decimal import Decimal
from typing import Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from moneytransfer.currency.catalog import Currency
from moneytransfer.currency.models import ConversionPhase, ConversionResult, OrchestratorState
from moneytransfer.security import SecurityReport


def format_amount(value: Decimal, places: int = 2) -> str:
    """Group thousands and fix the number of decimals, e.g. ``1,234.50``."""
    return f"{value:,.{places}f}"


class DisplayManager:
    """Manages all CLI display operations using Rich"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(width=100)
        self._last_phase: Optional[ConversionPhase] = None

    def show_currencies(self, currencies: Iterable[Currency]) -> None:
        table = Table(title="Supported currencies", box=box.SIMPLE_HEAVY)
        table.add_column("", no_wrap=True)
        table.add_column("Code", style="bold cyan")
        table.add_column("Name")
        table.add_column("Country")
        table.add_column("Sending limit", justify="right")
        for currency in currencies:
            table.add_row(
                currency.flag,
                currency.code,
                currency.display_name,
                currency.country,
                format_amount(currency.limit, 0),
            )
        self.console.print(table)

    def show_result(self, result: ConversionResult) -> None:
        body = (
            f"[bold]{format_amount(result.source_amount)} {result.from_currency}[/bold]"
            f"  →  [bold green]{format_amount(result.target_amount)} {result.to_currency}[/bold green]\n"
            f"[dim]1 {result.from_currency} = {result.rate} {result.to_currency}[/dim]"
        )
        self.console.print(Panel(body, title=result.currency_pair, border_style="green", expand=False))

    def show_limit_warning(self, currency: Currency) -> None:
        self.console.print(
            f"[bold red]Maximum sending amount: {format_amount(currency.limit, 0)} {currency.code}[/bold red]"
        )

    def show_error(self, message: str) -> None:
        self.console.print(Panel(message, title="Error", border_style="red", expand=False))

    def show_state(self, state: OrchestratorState) -> None:
        """Render an orchestrator snapshot; debounce ticks are not shown."""
        phase = state.phase
        if phase is ConversionPhase.DEBOUNCING:
            return
        if phase is ConversionPhase.REQUESTING:
            self.console.print(
                f"[dim]Converting {state.raw_amount_text} {state.from_currency.code} "
                f"→ {state.to_currency.code}...[/dim]"
            )
        elif phase is ConversionPhase.SETTLED and state.settled_result is not None:
            self.show_result(state.settled_result)
        elif phase is ConversionPhase.FAILED:
            self.show_error(state.error_message or "Check your internet connection")
        elif phase is ConversionPhase.IDLE:
            if state.over_limit:
                self.show_limit_warning(state.from_currency)
            elif self._last_phase is not ConversionPhase.IDLE:
                self.console.print("[dim]Enter an amount to convert.[/dim]")
        self._last_phase = phase

    def show_security(self, report: SecurityReport, allowed: bool) -> None:
        if report.is_clean:
            self.console.print(Panel(
                "Your device meets our security requirements.",
                title="Security Check Passed",
                border_style="green",
                expand=False,
            ))
            return

        lines = []
        for warning in sorted(report.warnings, key=lambda w: w.name):
            marker = "[bold red]![/bold red]" if warning in report.critical_warnings else "[yellow]•[/yellow]"
            lines.append(f"{marker} {warning.message}")
        verdict = "[green]You may continue.[/green]" if allowed else "[bold red]Access is blocked on this device.[/bold red]"
        lines.append("")
        lines.append(verdict)
        self.console.print(Panel(
            "\n".join(lines),
            title="Security Warning",
            border_style="yellow" if allowed else "red",
            expand=False,
        ))
