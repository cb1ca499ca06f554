"""CLI entry point using typer."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

import click
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mosh_launcher import __version__
from mosh_launcher.config import CONFIG_FILE, AppConfig, ensure_config_dir, load_config, save_config
from mosh_launcher.errors import EXIT_CONNECTION_ERROR, EXIT_INVALID_ARGS, InvalidArguments, LauncherError
from mosh_launcher.models import PortRange, PredictMode, SessionOptions
from mosh_launcher.services.client import find_client
from mosh_launcher.services.session import parse_predict, run_session
from mosh_launcher.utils.command import split_command
from mosh_launcher.utils.system import check_ssh

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="mosh-launcher",
    help="Start a mosh session: negotiate over ssh, then hand off to mosh-client.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

HELP_HINT = "Try 'mosh-launcher --help' for help."


def setup_logging(config: AppConfig, verbose: bool) -> None:
    """Log to the configured file, and to stderr with --verbose."""
    handlers: list[logging.Handler] = []
    if config.logging.file:
        ensure_config_dir()
        log_path = Path(config.logging.file).expanduser().resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_path)))
    if verbose:
        handlers.append(logging.StreamHandler())

    level = logging.DEBUG if verbose else getattr(logging, config.logging.level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers or [logging.NullHandler()],
        force=True,
    )


def report_error(error: LauncherError) -> None:
    err_console.print(f"[red]{escape(error.message)}[/red]")
    if isinstance(error, InvalidArguments):
        err_console.print(HELP_HINT)


@app.command()
def connect(
    target: str = typer.Argument(..., help="Remote endpoint as user@host"),
    client: str = typer.Option("", "--client", help="Path to the mosh-client executable"),
    ssh: str = typer.Option("", "--ssh", help='ssh command, e.g. "ssh -p 2222"'),
    server: str = typer.Option("", "--server", help="Command that starts mosh-server remotely"),
    ssh_arg: Optional[List[str]] = typer.Option(None, "--ssh-arg", help="Extra argument for ssh (repeatable)"),
    predict: Optional[PredictMode] = typer.Option(None, "--predict", "-a", help="Local echo prediction mode"),
    port: str = typer.Option("", "--port", "-p", help="Server-side UDP port or PORT:PORT range"),
    no_init: bool = typer.Option(False, "--no-init", help="Do not reset the terminal on session start"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    """Connect to TARGET and run the remote shell."""
    options = SessionOptions(
        client_path=client,
        ssh_command=ssh,
        server_command=server,
        ssh_args=list(ssh_arg or []),
        port_range=port,
        predict=predict,
        no_init=no_init,
    )

    try:
        cfg = load_config()
        setup_logging(cfg, verbose)
        exit_code = run_session(target, options, cfg)
    except LauncherError as e:
        logger.error("%s: %s", type(e).__name__, e.message)
        report_error(e)
        raise typer.Exit(e.exit_code)
    except Exception as e:
        logger.exception("Unexpected failure")
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(EXIT_CONNECTION_ERROR)

    raise typer.Exit(exit_code)


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _parse_command(value: str) -> str:
    split_command(value)
    return value


def _parse_port_range(value: str) -> str:
    return str(PortRange.parse(value))


def _parse_predict_mode(value: str) -> str:
    mode = parse_predict(value)
    return mode.value if mode else ""


def _parse_log_level(value: str) -> str:
    level = value.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise InvalidArguments(f"Unknown log level: {value}")
    return level


# key -> (parser for `config KEY VALUE`, label shown when the value is empty)
CONFIG_KEYS: dict[str, tuple[Callable[[str], object], str]] = {
    "client.path": (str, "(search)"),
    "ssh.command": (_parse_command, ""),
    "ssh.server": (str, ""),
    "session.port_range": (_parse_port_range, ""),
    "session.predict": (_parse_predict_mode, "(client default)"),
    "session.no_init": (_parse_bool, ""),
    "logging.level": (_parse_log_level, ""),
    "logging.file": (str, "(disabled)"),
}


def _get_value(cfg: AppConfig, key: str) -> object:
    section, attr = key.split(".")
    return getattr(getattr(cfg, section), attr)


@app.command()
def config(
    key: str = typer.Argument(None, help="Config key (e.g., client.path)"),
    value: str = typer.Argument(None, help="New value"),
) -> None:
    """View or modify configuration."""
    cfg = load_config()

    if key is None:
        table = Table(title="Configuration")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for name, (_, empty_label) in CONFIG_KEYS.items():
            current = _get_value(cfg, name)
            table.add_row(name, str(current) if current != "" else empty_label)

        console.print(table)
        if not CONFIG_FILE.exists():
            console.print(f"[dim]Defaults shown; {CONFIG_FILE} does not exist yet.[/dim]")
        return

    if key not in CONFIG_KEYS:
        console.print(f"[red]Unknown key: {escape(key)}[/red]")
        console.print(f"Valid keys: {', '.join(CONFIG_KEYS)}")
        raise typer.Exit(1)

    if value is None:
        console.print(f"{key} = {escape(str(_get_value(cfg, key)))}")
        return

    parser, _ = CONFIG_KEYS[key]
    try:
        typed_value = parser(value)
    except LauncherError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)

    section, attr = key.split(".")
    setattr(getattr(cfg, section), attr, typed_value)
    save_config(cfg)
    console.print(f"[green]{key} = {escape(str(typed_value))}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"mosh-launcher v{__version__}")

    cfg = load_config()
    try:
        installed, version_info = check_ssh(split_command(cfg.ssh.command).program or "ssh")
    except LauncherError as e:
        installed, version_info = False, e.message
    if installed:
        console.print(f"ssh: {escape(version_info)}")
    else:
        console.print(f"ssh: [yellow]{escape(version_info)}[/yellow]")

    try:
        console.print(f"mosh-client: {escape(find_client(cfg.client.path))}")
    except LauncherError:
        console.print("mosh-client: [yellow]not found[/yellow]")

    console.print(f"Python: {sys.version.split()[0]}")
    console.print(f"Config: {CONFIG_FILE}")


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code.

    Usage errors exit with 254 and session setup failures with 255;
    otherwise ``connect`` returns the remote shell's own exit status.
    """
    try:
        result = app(args=argv, prog_name="mosh-launcher", standalone_mode=False)
    except click.UsageError as e:
        err_console.print(f"[red]{escape(e.format_message())}[/red]")
        err_console.print(HELP_HINT)
        return EXIT_INVALID_ARGS
    except click.Abort:
        return EXIT_CONNECTION_ERROR
    return result if isinstance(result, int) else 0


def run() -> None:
    """Console script entrypoint."""
    sys.exit(main())


if __name__ == "__main__":
    run()
