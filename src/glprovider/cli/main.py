"""Main CLI entry point for the GitLab provider."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.table import Table

from glprovider import __version__
from glprovider.core.exceptions import MigrationError, ProviderError

if TYPE_CHECKING:
    from glprovider.core.config import ProviderConfig
    from glprovider.provider import GitLabProvider

console = Console()
err_console = Console(stderr=True)

DEFAULT_CONFIG_PATH = "~/.glprovider/config.yaml"


class ProviderContext:
    """Shared context for CLI commands with lazy initialization."""

    def __init__(self, config_path: str):
        """Initialize context with config path.

        Args:
            config_path: Path to configuration file; a missing default file
                means "defaults plus environment"
        """
        self.config_path = config_path
        self._config: ProviderConfig | None = None
        self._provider: GitLabProvider | None = None

    @property
    def config(self) -> ProviderConfig:
        """Get or load config lazily."""
        if self._config is None:
            from glprovider.core.config import ProviderConfig
            from glprovider.utils.logging import setup_logging

            path = Path(self.config_path).expanduser()
            if path.exists() or self.config_path != DEFAULT_CONFIG_PATH:
                self._config = ProviderConfig.from_file(path)
            else:
                self._config = ProviderConfig()

            setup_logging(
                level=self._config.logging.level,
                format=self._config.logging.format,
                output=self._config.logging.output,
            )
        return self._config

    @property
    def provider(self) -> GitLabProvider:
        """Get or create the provider lazily; no GitLab call is made here."""
        if self._provider is None:
            from glprovider.provider import GitLabProvider

            self._provider = GitLabProvider(self.config)
        return self._provider


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(),
    default=DEFAULT_CONFIG_PATH,
    help="Path to configuration file",
)
@click.pass_context
def cli(ctx: click.Context, config: str) -> None:
    """GitLab resource provider - manage GitLab objects declaratively."""
    ctx.obj = ProviderContext(config_path=config)


@cli.command(name="resources")
@click.option("--format", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def list_resources(ctx: click.Context, format: str) -> None:
    """List registered resource and data source types."""
    registry = ctx.obj.provider.registry

    rows = [
        {
            "type": name,
            "kind": "resource",
            "schema_version": registry.resource(name).schema_version,
            "identity": registry.resource(name).identifier.format,
        }
        for name in registry.resource_types
    ] + [
        {"type": name, "kind": "data source", "schema_version": None, "identity": None}
        for name in registry.data_source_types
    ]

    if format == "json":
        print(json.dumps(rows, indent=2))
        return

    table = Table(title=f"GitLab provider types ({len(rows)} total)")
    table.add_column("Type", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Schema Version", style="green")
    table.add_column("Identity", style="yellow")
    for row in rows:
        version = row["schema_version"]
        table.add_row(
            row["type"],
            row["kind"],
            "-" if version is None else str(version),
            row["identity"] or "-",
        )
    console.print(table)


@cli.group()
def state() -> None:
    """Work with persisted state documents."""


def upgrade_state_document(provider: GitLabProvider, document: dict[str, Any]) -> dict[str, int]:
    """Upgrade every managed instance of a registered type in place.

    Args:
        provider: Provider holding the type registry
        document: Parsed state document

    Returns:
        Counts of upgraded, current and skipped instances

    Raises:
        MigrationError: If an instance cannot be migrated
    """
    counts = {"upgraded": 0, "current": 0, "skipped": 0}

    for resource in document.get("resources", []):
        type_name = resource.get("type", "")
        instances = resource.get("instances", [])
        if resource.get("mode", "managed") != "managed" or type_name not in provider.registry.resource_types:
            counts["skipped"] += len(instances)
            continue

        current_version = provider.registry.resource(type_name).schema_version
        for instance in instances:
            from_version = int(instance.get("schema_version", 0))
            if from_version == current_version:
                counts["current"] += 1
                continue

            attributes = instance.get("attributes", {})
            if not isinstance(attributes, dict):
                raise MigrationError(
                    f"{type_name} instance attributes must be an object, "
                    f"got {type(attributes).__name__}"
                )
            instance["attributes"] = provider.upgrade_resource_state(
                type_name, attributes, from_version
            )
            instance["schema_version"] = current_version
            counts["upgraded"] += 1

    return counts


@state.command(name="upgrade")
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write result here instead of stdout")
@click.pass_context
def upgrade_state(ctx: click.Context, state_file: str, output: str | None) -> None:
    """Upgrade a state document to the current schema versions (offline)."""
    from glprovider.utils.logging import get_logger, log_error

    logger = get_logger(__name__)

    try:
        document = json.loads(Path(state_file).read_text())
        counts = upgrade_state_document(ctx.obj.provider, document)
    except (ProviderError, ValueError) as e:
        log_error(logger, e, operation="state_upgrade", state_file=state_file)
        err_console.print(f"[red]✗ State upgrade failed: {e}[/red]")
        sys.exit(1)

    rendered = json.dumps(document, indent=2)
    if output:
        Path(output).write_text(rendered + "\n")
    else:
        print(rendered)

    err_console.print(
        f"[green]✓ Upgraded {counts['upgraded']} instance(s)[/green], "
        f"{counts['current']} already current, {counts['skipped']} skipped"
    )


@cli.group(name="id")
def identity() -> None:
    """Work with resource identity strings."""


@identity.command(name="decode")
@click.argument("type_name")
@click.argument("resource_id")
@click.pass_context
def decode_id(ctx: click.Context, type_name: str, resource_id: str) -> None:
    """Split a resource identity into its components."""
    registry = ctx.obj.provider.registry
    try:
        shape = registry.resource(type_name).identifier
    except KeyError as e:
        err_console.print(f"[red]✗ {e.args[0]}[/red]")
        sys.exit(1)

    try:
        components = shape.decode(resource_id)
    except ProviderError as e:
        err_console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    table = Table(title=f"{type_name} {shape.format}")
    table.add_column("Component", style="cyan")
    table.add_column("Value", style="green")
    for name, value in zip(shape.names, components, strict=True):
        table.add_row(name, repr(value))
    console.print(table)


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate configuration and GitLab connectivity."""
    from glprovider.utils.logging import get_logger, log_error

    logger = get_logger(__name__)
    provider_ctx = ctx.obj

    console.print("[bold]1. Configuration[/bold]")
    console.print(f"  Path: {Path(provider_ctx.config_path).expanduser()}")
    try:
        config = provider_ctx.config
    except ProviderError as e:
        log_error(logger, e, operation="load_config", config_path=provider_ctx.config_path)
        console.print(f"  [red]✗ Config invalid: {e}[/red]")
        sys.exit(1)
    console.print("  [green]✓ Config valid[/green]")
    console.print(f"  GitLab URL: {config.gitlab.base_url}\n")

    console.print("[bold]2. GitLab Connectivity[/bold]")
    if not config.gitlab.token:
        console.print("  [red]✗ No token configured (set gitlab.token or GITLAB_TOKEN)[/red]")
        sys.exit(1)
    try:
        _ = provider_ctx.provider.client
    except ProviderError as e:
        log_error(logger, e, operation="connect", url=config.gitlab.base_url)
        console.print(f"  [red]✗ GitLab connection failed: {e}[/red]")
        sys.exit(1)
    console.print("  [green]✓ GitLab connection successful[/green]\n")

    console.print("[bold green]✓ Validation complete![/bold green]")


if __name__ == "__main__":
    cli()
