from __future__ import annotations

import asyncio
from typing import Optional

import typer
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.patch_stdout import patch_stdout

from moneytransfer.cli.display import DisplayManager
from moneytransfer.config import DEFAULT_CONFIG_PATH, Config, load_config
from moneytransfer.currency.catalog import CATALOG, Currency
from moneytransfer.currency.normalizer import is_over_limit, normalize, parse, validate_amount
from moneytransfer.currency.orchestrator import ConversionOrchestrator
from moneytransfer.currency.service import ConversionService
from moneytransfer.events import ConsoleSink, EventManager, LoggingSink
from moneytransfer.providers import ConversionProvider, get_provider
from moneytransfer.security import ProbeSecurityChecker, SecurityPolicy
from moneytransfer.utils.errors import ConfigurationError, InputError, InputIssue, ProviderError
from moneytransfer.utils.logging import get_logger

logger = get_logger(__name__)

app = typer.Typer(add_completion=False, help="MoneyTransfer currency converter")

CONFIG_OPTION = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to config.yaml")
PROVIDER_OPTION = typer.Option(None, "--provider", "-p", help="Override provider kind: fixture | http")


def _load_config(config_path: str) -> Config:
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


def build_event_sink(cfg: Config) -> EventManager:
    manager = EventManager()
    if cfg.console_events:
        manager.add_sink(ConsoleSink(print_parameters=cfg.print_parameters))
    if cfg.logging_events:
        manager.add_sink(LoggingSink())
    return manager


def build_provider(cfg: Config, provider_override: Optional[str] = None) -> ConversionProvider:
    kind = provider_override or cfg.provider_kind
    options = cfg.provider_options() if kind == cfg.provider_kind else {}
    try:
        return get_provider(kind, **options)
    except ConfigurationError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _currency(code: str) -> Currency:
    currency = CATALOG.by_code(code)
    if currency is None:
        typer.secho(
            f"Unsupported currency: {code}. Choose one of {', '.join(CATALOG.codes())}",
            fg=typer.colors.RED,
        )
        raise typer.Exit(code=1)
    return currency


@app.command("currencies")
def currencies():
    """List supported currencies and their sending limits."""
    DisplayManager().show_currencies(CATALOG.all())


@app.command("convert")
def convert(
    amount: str = typer.Argument(..., help="Amount, '.' or ',' as decimal separator"),
    from_code: str = typer.Option("PLN", "--from", "-f", help="Currency to send"),
    to_code: str = typer.Option("UAH", "--to", "-t", help="Currency to receive"),
    reverse: bool = typer.Option(False, "--reverse", "-r", help="Treat AMOUNT as the amount to receive"),
    provider: Optional[str] = PROVIDER_OPTION,
    config: str = CONFIG_OPTION,
):
    """Convert an amount once and print the result."""
    cfg = _load_config(config)
    source = _currency(from_code)
    target = _currency(to_code)
    display = DisplayManager()

    text = normalize(amount)
    try:
        if reverse:
            value = parse(text)
            if value is None:
                raise InputError(InputIssue.EMPTY, f"No amount entered: {amount!r}")
            if value <= 0:
                raise InputError(InputIssue.NOT_POSITIVE, f"Amount must be positive, got: {value}")
        else:
            value = validate_amount(text, source)
    except InputError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)

    service = ConversionService(build_provider(cfg, provider), build_event_sink(cfg))
    call = service.convert_reverse if reverse else service.convert
    try:
        result = asyncio.run(call(source.code, target.code, value))
    except ProviderError as e:
        display.show_error(str(e))
        raise typer.Exit(code=2)

    display.show_result(result)
    if reverse and is_over_limit(result.source_amount, source):
        display.show_limit_warning(source)


@app.command("security")
def security(config: str = CONFIG_OPTION):
    """Run the device security checks and show the verdict."""
    cfg = _load_config(config)
    try:
        policy = SecurityPolicy.from_config(cfg.security_policy)
    except ConfigurationError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)

    report = ProbeSecurityChecker(sink=build_event_sink(cfg)).check()
    allowed = policy.allows(report)
    DisplayManager().show_security(report, allowed)
    if not allowed:
        raise typer.Exit(code=3)


async def run_interactive(orchestrator: ConversionOrchestrator, display: DisplayManager) -> None:
    """Prompt loop feeding user input into ``orchestrator``."""
    completer = WordCompleter(["from", "to", "swap", "retry", "quit", *CATALOG.codes()], ignore_case=True)
    session: PromptSession = PromptSession(completer=completer)
    unsubscribe = orchestrator.subscribe(display.show_state)
    orchestrator.convert_now()
    try:
        with patch_stdout():
            while True:
                try:
                    line = await session.prompt_async("amount> ")
                except (EOFError, KeyboardInterrupt):
                    break
                if not handle_command(orchestrator, display, line):
                    break
    finally:
        unsubscribe()
        orchestrator.close()
        await orchestrator.drain()


def handle_command(orchestrator: ConversionOrchestrator, display: DisplayManager, line: str) -> bool:
    """Apply one line of interactive input. Returns False when the user quits."""
    command = line.strip()
    if not command:
        return True
    words = command.split()
    keyword = words[0].lower()
    if keyword in ("quit", "exit"):
        return False
    try:
        if keyword == "swap":
            orchestrator.swap_currencies()
        elif keyword == "retry":
            orchestrator.convert_now()
        elif keyword in ("from", "to") and len(words) == 2:
            if keyword == "from":
                orchestrator.set_from_currency(words[1])
            else:
                orchestrator.set_to_currency(words[1])
        else:
            orchestrator.set_amount(command)
    except InputError as e:
        display.show_error(str(e))
    return True


@app.command("interactive")
def interactive(
    provider: Optional[str] = PROVIDER_OPTION,
    config: str = CONFIG_OPTION,
):
    """Type amounts and watch conversions update as you go."""
    cfg = _load_config(config)
    display = DisplayManager()
    sink = build_event_sink(cfg)

    try:
        policy = SecurityPolicy.from_config(cfg.security_policy)
    except ConfigurationError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)
    report = ProbeSecurityChecker(sink=sink).check()
    allowed = policy.allows(report)
    if not report.is_clean or not allowed:
        display.show_security(report, allowed)
    if not allowed:
        raise typer.Exit(code=3)

    async def _run() -> None:
        orchestrator = ConversionOrchestrator(
            provider=build_provider(cfg, provider),
            sink=sink,
            debounce_seconds=cfg.debounce_seconds,
            from_currency=cfg.default_from,
            to_currency=cfg.default_to,
            amount_text=cfg.default_amount,
        )
        await run_interactive(orchestrator, display)

    try:
        asyncio.run(_run())
    except InputError as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
