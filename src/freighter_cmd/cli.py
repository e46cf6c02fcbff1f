"""CLI for freighter-cmd.

Provides a command-line interface using Typer for:
- Running an operation script in a fresh container
- Provisioning the execution image
- Inspecting the effective configuration
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from freighter_cmd.context import initialize
from freighter_cmd.core.config import load_config, parse_option_pairs
from freighter_cmd.core.errors import CommandExecutionError, FreighterCmdError
from freighter_cmd.core.schemas import ExecutionConfig
from freighter_cmd.utils.logging import setup_logging

app = typer.Typer(
    name="freighter-cmd",
    help="Run named scripts in throwaway Docker containers",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

EXIT_COMMAND_FAILED = 1
EXIT_RUNTIME_ERROR = 2


def _effective_config(config: Path | None, options: list[str] | None) -> ExecutionConfig:
    """Merge the optional config file with ``KEY=VALUE`` overrides."""
    try:
        overrides = parse_option_pairs(options or [])
        if config is not None:
            return load_config(config, overrides=overrides)
        return ExecutionConfig.from_options(overrides)
    except Exception as e:
        err_console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(EXIT_RUNTIME_ERROR) from e


@app.command()
def run(
    operation: str = typer.Argument(..., help="Operation name (script under the commands dir)"),
    args: list[str] | None = typer.Argument(None, help="Arguments passed to the script"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration file (YAML/JSON)"
    ),
    option: list[str] | None = typer.Option(
        None, "--option", "-o", help="Override a config option (KEY=VALUE, repeatable)"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", "-t", help="Seconds to wait for the script to finish"
    ),
    skip_pull: bool = typer.Option(
        False, "--skip-pull", help="Do not check for or pull the image first"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Output logs in JSON format"),
) -> None:
    """Run an operation and print its output."""
    setup_logging(level=log_level, json_format=json_logs, rich_console=not json_logs)
    exec_config = _effective_config(config, option)

    try:
        with initialize(exec_config, provision=not skip_pull) as context:
            output = context.operation(operation).run(*(args or []), timeout=timeout)
    except CommandExecutionError as e:
        typer.echo(e.output, nl=False, err=True)
        raise typer.Exit(EXIT_COMMAND_FAILED) from None
    except FreighterCmdError as e:
        err_console.print(f"[bold red]Error:[/] {e}")
        raise typer.Exit(EXIT_RUNTIME_ERROR) from None

    typer.echo(output, nl=False)


@app.command()
def pull(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration file (YAML/JSON)"
    ),
    option: list[str] | None = typer.Option(
        None, "--option", "-o", help="Override a config option (KEY=VALUE, repeatable)"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Pull even if the image is present"),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
) -> None:
    """Provision the execution image."""
    setup_logging(level=log_level)
    exec_config = _effective_config(config, option)

    console.print(f"[bold blue]Provisioning image {exec_config.image}...[/]")
    try:
        context = initialize(exec_config, force_pull=force)
    except FreighterCmdError as e:
        err_console.print(f"[bold red]Error:[/] {e}")
        raise typer.Exit(EXIT_RUNTIME_ERROR) from None
    context.close()
    console.print(f"[bold green]Image {exec_config.image} is available[/]")


@app.command()
def show_config(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration file (YAML/JSON)"
    ),
    option: list[str] | None = typer.Option(
        None, "--option", "-o", help="Override a config option (KEY=VALUE, repeatable)"
    ),
) -> None:
    """Print the effective configuration."""
    exec_config = _effective_config(config, option)

    table = Table(title="Execution Configuration")
    table.add_column("Option", style="cyan")
    table.add_column("Value", style="green")
    for name, value in exec_config.model_dump().items():
        table.add_row(name, "-" if value is None else str(value))
    table.add_row("image", exec_config.image)
    console.print(table)


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("freighter-cmd.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# freighter-cmd configuration
# Keys may also be written in their CamelCase form (CommandsDir, DockerEndpoint, ...)

commands_dir: /root/commands
docker_endpoint: unix:///var/run/docker.sock
container_repository: freighterio/cmd
container_tag: latest
interpreter: bash

# Completion polling (ms) and deadline (s)
poll_interval_ms: 100
max_poll_interval_ms: 1000
poll_backoff: 1.5
timeout_seconds: 300

# Retries for idempotent daemon calls on transient transport errors
transport_retries: 2
retry_backoff_ms: 200
"""
    if output.exists():
        console.print(f"[bold yellow]{output} already exists, not overwriting[/]")
        raise typer.Exit(1)
    output.write_text(sample_config, encoding="utf-8")
    console.print(f"[bold green]Created sample configuration: {output}[/]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
