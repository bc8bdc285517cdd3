# CLI implementation using Typer: interactive menu plus scriptable key commands.
from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

import typer

from . import __version__
from .config import AppConfig, dump_default_config, load_config
from .logging import configure_logging
from .models import Algorithm, KeyRequest, SigningMode
from .services.expiry import days_remaining
from .services.key_lifecycle import KeyLifecycleManager
from .shell import InteractionShell
from .storage.registry import format_entry
from .utils.errors import ConfigError, KeymasterError

app = typer.Typer(help="Key generation with an alias/expiry registry")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"keymaster {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", metavar="PATH", help="YAML configuration file"),
    store: Optional[Path] = typer.Option(None, "--store", metavar="DIR", help="Directory for keys and registry"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="critical|error|warning|info|debug"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit structured JSON logs"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True),
) -> None:
    try:
        app_config = load_config(config)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    if store is not None:
        storage = app_config.storage.model_copy(update={"store_dir": store})
        app_config = app_config.model_copy(update={"storage": storage})
    configure_logging(
        log_level or app_config.logging.normalized_level(),
        json=json_logs or app_config.logging.json_output,
    )
    ctx.obj = app_config
    if ctx.invoked_subcommand is None:
        _shell(app_config).run()


def _config(ctx: typer.Context) -> AppConfig:
    return ctx.obj


def _manager(app_config: AppConfig) -> KeyLifecycleManager:
    return KeyLifecycleManager.from_config(app_config)


def _shell(app_config: AppConfig) -> InteractionShell:
    return InteractionShell(
        _manager(app_config), default_days=app_config.generation.default_validity_days
    )


@app.command()
def menu(ctx: typer.Context) -> None:
    """Open the interactive key management menu"""
    _shell(_config(ctx)).run()


@app.command()
def generate(
    ctx: typer.Context,
    alias: str = typer.Option(..., "--alias", help="Unique key alias"),
    algorithm: Algorithm = typer.Option(Algorithm.RSA, "--algorithm", case_sensitive=False),
    key_size: Optional[int] = typer.Option(None, "--key-size", help="RSA: 2048|3072|4096, ECDSA: 256|384|521"),
    ca_cert: Optional[Path] = typer.Option(None, "--ca-cert", help="CA certificate (PEM)"),
    ca_key: Optional[Path] = typer.Option(None, "--ca-key", help="CA private key (PEM)"),
    days: Optional[int] = typer.Option(None, "--days", help="Validity in days"),
):
    """Generate a single key without prompting"""
    app_config = _config(ctx)
    signing = SigningMode(ca_cert, ca_key)
    request = KeyRequest(
        alias=alias,
        algorithm=algorithm,
        key_size=key_size if key_size is not None else algorithm.key_sizes[0],
        signing=signing,
        validity_days=days if days is not None else app_config.generation.default_validity_days,
    )
    try:
        result = _manager(app_config).generate(request)
    except KeymasterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    verb = "Replaced" if result.replaced else "Created"
    typer.echo(f"{verb} {result.path} (expires {result.expiry_date:%Y-%m-%d}, {result.size_bytes} bytes)")


@app.command("list")
def list_keys(ctx: typer.Context):
    """List registry entries with the days left before expiry"""
    try:
        entries = _manager(_config(ctx)).list_entries()
    except KeymasterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    if not entries:
        typer.echo("No keys found")
        raise typer.Exit(code=0)
    today = date.today()
    for entry in entries:
        left = days_remaining(entry.expiry_date, today)
        status = "expired" if left < 0 else f"{left} days left"
        typer.echo(f"{format_entry(entry)}  [{status}]")


@app.command()
def check(ctx: typer.Context):
    """Compare the registry with the key files on disk"""
    try:
        report = _manager(_config(ctx)).check()
    except KeymasterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    for alias in report.missing_material:
        typer.echo(f"missing material: {alias}")
    for alias in report.untracked_material:
        typer.echo(f"untracked material: {alias}")
    if not report.consistent:
        raise typer.Exit(code=1)
    typer.echo("Registry consistent")


@app.command()
def remove(ctx: typer.Context, alias: str):
    """Delete a key's files and its registry entry"""
    try:
        removed = _manager(_config(ctx)).remove(alias)
    except KeymasterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    if not removed:
        typer.echo(f"Key not found: {alias}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Removed {alias}")


@app.command("init-config")
def init_config(target: Path = typer.Argument(..., help="Where to write the YAML file")):
    """Write the default configuration"""
    try:
        dump_default_config(target)
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Wrote {target}")


if __name__ == "__main__":
    app()
