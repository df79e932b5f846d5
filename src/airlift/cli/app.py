# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/cli/app.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from airlift.assets.fetcher import save_stream
from airlift.driver import available_drivers, get_driver
from airlift.driver.base import Driver
from airlift.errors import DriverError, FetchError, UnknownDriverError
from airlift.logging.log import init_logging
from airlift.observers.dispatcher import EventBus
from airlift.observers.logger import LoggerObserver
from airlift.utils.execution import ExecutionContext
from airlift.utils.retry import retry_fetch


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Airlift distribution driver CLI")

RETRY_DELAY_SECONDS = 2


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------

def _driver(
    distribution: str,
    *,
    version: str = "",
    verbose: bool = False,
    **kwargs,
) -> Driver:
    logger, run_id, _ = init_logging(distribution=distribution, version=version, verbose=verbose)
    bus = EventBus(observers=[LoggerObserver(logger)])
    try:
        return get_driver(distribution, version=version, bus=bus, run_id=run_id, **kwargs)
    except UnknownDriverError as e:
        raise typer.BadParameter(str(e), param_hint="--distribution")


def _with_retries(fn, retries: int):
    def _on_retry(attempt: int, exc: FetchError) -> None:
        typer.secho(f"attempt {attempt}/{retries} failed: {exc}", fg=typer.colors.YELLOW, err=True)

    return retry_fetch(attempts=retries, delay=RETRY_DELAY_SECONDS, on_retry=_on_retry)(fn)


def _fail(exc) -> NoReturn:
    typer.secho(f"ERROR: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def drivers() -> None:
    """List the supported distributions."""
    for name in available_drivers():
        typer.echo(name)


@app.command("write-config")
def write_config(
    distribution: str = typer.Option("k3s", "--distribution", "-d"),
    data_dir: Optional[str] = typer.Option(None, "--data-dir"),
    kubeconfig: Optional[str] = typer.Option(None, "--kubeconfig"),
    kubeconfig_mode: Optional[str] = typer.Option(None, "--kubeconfig-mode"),
    disable: List[str] = typer.Option([], "--disable", help="Component to disable (repeatable)"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    """Merge defaults with the on-disk config.yaml and write it back."""
    overrides = {
        "data_dir": data_dir,
        "kube_config": kubeconfig,
        "kube_config_mode": kubeconfig_mode,
        "disable": disable or None,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    try:
        drv = _driver(distribution, verbose=verbose, **overrides)
        path = drv.write_config()
    except DriverError as e:
        _fail(e)
    typer.echo(str(path))


@app.command("fetch-binary")
def fetch_binary(
    version: str = typer.Option(..., "--version", "-v"),
    output: Path = typer.Option(..., "--output", "-o", help="Destination file"),
    distribution: str = typer.Option("k3s", "--distribution", "-d"),
    retries: int = typer.Option(1, "--retries"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    """Download the distribution binary for VERSION."""
    drv = _driver(distribution, version=version, verbose=verbose)
    try:
        written = _with_retries(lambda: save_stream(drv.binary(), output), retries)()
    except DriverError as e:
        _fail(e)
    except OSError as e:
        _fail(f"cannot write {output}: {e}")
    typer.echo(f"{output} ({written} bytes)")


@app.command()
def images(
    version: str = typer.Option(..., "--version", "-v"),
    distribution: str = typer.Option("k3s", "--distribution", "-d"),
    resolve: bool = typer.Option(False, "--resolve", help="Resolve each image to its manifest digest"),
    retries: int = typer.Option(1, "--retries"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    """Print the images a distribution release requires."""
    drv = _driver(distribution, version=version, verbose=verbose)
    try:
        if resolve:
            resolved = _with_retries(drv.images, retries)()
            for ref, img in resolved.items():
                typer.echo(f"{ref}\t{img.digest}")
        else:
            for ref in _with_retries(drv.image_list, retries)():
                typer.echo(ref)
    except DriverError as e:
        _fail(e)


@app.command()
def readiness(
    distribution: str = typer.Option("k3s", "--distribution", "-d"),
) -> None:
    """Print the objects that must be ready before the cluster is usable."""
    drv = _driver(distribution)
    for obj in drv.system_objects():
        typer.echo(f"{obj.namespace}/{obj.name}\t{obj.kind}.{obj.group}")


@app.command()
def bootstrap(
    version: str = typer.Option(..., "--version", "-v"),
    install_script: Path = typer.Option(..., "--install-script", exists=True, dir_okay=False),
    distribution: str = typer.Option("k3s", "--distribution", "-d"),
    bin_dir: Optional[Path] = typer.Option(None, "--bin-dir"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds before the installer is terminated"),
    retries: int = typer.Option(1, "--retries"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Install without starting the service"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    """Write config, fetch the binary and run the installer."""
    typer.secho(f"Bootstrapping {distribution} {version}", bold=True)
    drv = _driver(
        distribution,
        version=version,
        verbose=verbose,
        install_script=install_script.read_text(),
        bin_dir=bin_dir,
        execution=ExecutionContext(dry_run=dry_run),
    )
    try:
        drv.write_config()
        target = drv.bin_dir / drv.name
        target.parent.mkdir(parents=True, exist_ok=True)
        _with_retries(lambda: save_stream(drv.binary(), target), retries)()
        drv.start(sys.stdout, timeout=timeout)
    except DriverError as e:
        _fail(e)
    except OSError as e:
        _fail(e)

    typer.echo("Waiting on:")
    for obj in drv.system_objects():
        typer.echo(f"  {obj.namespace}/{obj.name} ({obj.kind}.{obj.group})")


if __name__ == "__main__":
    app()
