#!/usr/bin/env python3
"""
Command-line interface for the KV Delete Toolkit.

Shows capability paths and permission flags for a secret and runs delete,
destroy, and undelete operations against Vault.
"""

import asyncio
import logging
import sys
from typing import Any, Callable, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .capabilities import ActionKind, CapabilityAvailability, CapabilityPathResolver
from .config import get_config
from .delete import DeleteDispatcher, DeleteOutcome, DeleteVariant
from .exceptions import DeleteToolkitError
from .models import (
    EngineRef,
    InteractionMode,
    MenuInputs,
    SecretDataModel,
    SecretModel,
    SelectedVersion,
    build_composite_id,
)
from .vault import VaultHttpStore

console = Console()
err_console = Console(stderr=True)


class ConsoleNotifier:
    """Prints delete errors."""

    def danger(self, message: str) -> None:
        console.print(f"[red]✗ {message}[/red]")


class ConsoleNavigator:
    """Reports where the UI would navigate."""

    def transition_to(self, route: str, *params: Any) -> None:
        target = " ".join(str(p) for p in params if p)
        console.print(f"[blue]→ {route}[/blue] {target}".rstrip())


class ConsoleReloader:
    """Reports that a reload was requested."""

    def reload(self) -> None:
        console.print("[yellow]⚠ Unexpected response from Vault, reload the view[/yellow]")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


_SECRET_OPTIONS = [
    click.option("--backend", required=True, help="Mount path of the KV engine"),
    click.option("--secret", "secret_id", required=True, help="Secret path"),
    click.option("--version", "version", type=int, help="Selected version"),
    click.option(
        "--current-version", type=int, help="Current version from the metadata"
    ),
    click.option("--v2/--v1", "is_v2", default=True, help="KV engine version"),
    click.option(
        "--mode",
        type=click.Choice([m.value for m in InteractionMode]),
        default=InteractionMode.SHOW.value,
        help="Interaction mode of the secret view",
    ),
    click.option(
        "--metadata-access/--no-metadata-access",
        default=True,
        help="Whether the token can read the secret's metadata",
    ),
]


def secret_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options describing the secret the command operates on."""
    for option in reversed(_SECRET_OPTIONS):
        func = option(func)
    return func


def build_inputs(
    backend: str,
    secret_id: str,
    version: Optional[int],
    current_version: Optional[int],
    is_v2: bool,
    mode: str,
    metadata_access: bool,
) -> MenuInputs:
    """Build menu inputs from command line options."""
    model = SecretModel(
        id=secret_id,
        backend=backend,
        engine=EngineRef(id=backend, version=2 if is_v2 else 1),
        current_version=current_version,
        selected_version=SelectedVersion(version),
    )
    data_id = build_composite_id(backend, secret_id, version) if is_v2 else secret_id
    return MenuInputs(
        model=model,
        model_for_data=SecretDataModel(id=data_id, version=version),
        mode=mode,
        is_v2=is_v2,
        can_read_secret_metadata=metadata_access,
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override the configured log level",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """KV Delete Toolkit - permission-aware deletes for versioned secrets."""
    _setup_logging(log_level or get_config().log_level)
    if ctx.invoked_subcommand is None:
        console.print(
            Panel.fit(
                f"[bold blue]KV Delete Toolkit[/bold blue] v{__version__}\n"
                "[dim]Permission-aware deletes for versioned secrets[/dim]\n\n"
                "Use [bold]kvdel --help[/bold] to see available commands.",
                border_style="blue",
            )
        )


@cli.group()
def config() -> None:
    """Inspect toolkit configuration."""
    pass


@config.command("show")
@click.option("--format", type=click.Choice(["table", "json", "yaml"]), default="table")
def config_show(format: str) -> None:
    """Display current configuration."""
    config_dict = get_config().to_dict()
    if config_dict.get("vault_token"):
        config_dict["vault_token"] = "********"

    if format == "json":
        console.print_json(data=config_dict)
    elif format == "yaml":
        import yaml

        console.print(yaml.safe_dump(config_dict, default_flow_style=False))
    else:
        table = Table(title="KV Delete Toolkit Configuration", show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for key, value in config_dict.items():
            if value is None:
                value = "[dim]Not configured[/dim]"
            elif isinstance(value, bool):
                value = "✓" if value else "✗"
            table.add_row(key, str(value))
        console.print(table)


@cli.command("paths")
@secret_options
def paths(**options: Any) -> None:
    """Show the capability paths checked for a secret."""
    inputs = build_inputs(**options)
    resolved = CapabilityPathResolver().resolve_all(inputs)

    table = Table(title="Capability Paths", show_header=True)
    table.add_column("Action", style="cyan")
    table.add_column("Path", style="green")
    for kind in ActionKind:
        path = resolved[kind]
        table.add_row(kind.value, path if path else "[dim]none[/dim]")
    console.print(table)


async def _check(inputs: MenuInputs) -> CapabilityAvailability:
    async with VaultHttpStore() as store:
        availability = CapabilityAvailability(store)
        await availability.refresh(inputs)
        return availability


@cli.command("capabilities")
@secret_options
def capabilities(**options: Any) -> None:
    """Check which delete actions the current token may perform."""
    inputs = build_inputs(**options)
    availability = asyncio.run(_check(inputs))

    table = Table(title="Delete Permissions", show_header=True)
    table.add_column("Flag", style="cyan")
    table.add_column("Value")
    for name, value in availability.flags().items():
        table.add_row(name, "[green]✓[/green]" if value else "[red]✗[/red]")
    console.print(table)

    allowed = [v.value for v in availability.allowed_variants()]
    console.print(f"Allowed: {', '.join(allowed) if allowed else '[dim]none[/dim]'}")


async def _delete(
    inputs: MenuInputs, variant: DeleteVariant, force: bool, yes: bool
) -> Tuple[Optional[DeleteOutcome], Optional[str]]:
    async with VaultHttpStore() as store:
        if not force:
            availability = CapabilityAvailability(store)
            await availability.refresh(inputs)
            if not availability.permits(variant):
                return None, f"Not permitted to {variant.value} this secret"

        dispatcher = DeleteDispatcher(
            store=store,
            navigator=ConsoleNavigator(),
            notifier=ConsoleNotifier(),
            reloader=ConsoleReloader(),
            refresh=lambda: console.print(f"[green]✓ {variant.value} completed[/green]"),
        )
        dispatcher.request_delete()
        if not yes and not click.confirm(
            f"Really {variant.value} {inputs.model.mount}/{inputs.model.id}?"
        ):
            dispatcher.cancel()
            return DeleteOutcome.SKIPPED, None

        outcome = await dispatcher.handle_delete(variant, inputs)
        return outcome, dispatcher.last_error


@cli.command("delete")
@secret_options
@click.option(
    "--variant",
    type=click.Choice([v.value for v in DeleteVariant]),
    required=True,
    help="Delete operation to perform",
)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.option("--force", is_flag=True, help="Skip the capability check")
def delete(variant: str, yes: bool, force: bool, **options: Any) -> None:
    """Delete, destroy, or undelete a secret version."""
    inputs = build_inputs(**options)
    try:
        outcome, error = asyncio.run(
            _delete(inputs, DeleteVariant(variant), force=force, yes=yes)
        )
    except DeleteToolkitError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if outcome is None:
        console.print(f"[red]✗ {error}[/red]")
        sys.exit(1)
    if outcome == DeleteOutcome.ERROR_SHOWN:
        sys.exit(1)
    if outcome == DeleteOutcome.SKIPPED:
        console.print("[yellow]Cancelled[/yellow]")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
