"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from deviceflasher.api import Client
from deviceflasher.core.config import load_settings
from deviceflasher.core.errors import DeviceFlasherError

app = typer.Typer(help="Flash factory images onto Android devices via adb and fastboot")


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(asctime)s][%(levelname)s] %(message)s",
    )


def _build_client(image: Path | None, platform_tools: Path | None, debug: bool | None) -> Client:
    settings = load_settings(platform_tools_path=platform_tools, debug=debug)
    _configure_logging(settings.debug)
    return Client(image, settings=settings)


@app.command("devices")
def list_devices(
    platform_tools: Path | None = typer.Option(None, "--platform-tools", help="Platform-tools directory"),
    debug: bool | None = typer.Option(None, "--debug/--no-debug", help="Verbose logging"),
) -> None:
    """List devices visible to adb or fastboot."""
    try:
        client = _build_client(None, platform_tools, debug)
        devices = client.discover_devices()
        for device in devices.values():
            typer.echo(f"{device.id} {device.codename} ({device.discovery_tool.value})")
    except DeviceFlasherError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("flash")
def flash(
    image: Path = typer.Option(..., "--image", help="Factory image zip"),
    platform_tools: Path | None = typer.Option(None, "--platform-tools", help="Platform-tools directory"),
    parallel: bool | None = typer.Option(None, "--parallel/--sequential", help="Flash devices concurrently"),
    debug: bool | None = typer.Option(None, "--debug/--no-debug", help="Verbose logging"),
) -> None:
    """Flash the factory image onto every attached device.

    Each device is unlocked, flashed, re-locked and rebooted. Bootloader
    unlock and lock must be confirmed on the device itself.
    """
    try:
        with _build_client(image, platform_tools, debug) as client:
            devices = client.discover_devices()
            results = client.flash_devices(list(devices.values()), parallel=parallel)
    except DeviceFlasherError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    failed = False
    for result in results:
        if result.ok:
            typer.echo(f"{result.device.id}: flashed {result.device.codename}")
        else:
            failed = True
            typer.echo(f"{result.device.id}: Error: {result.error}", err=True)
    if failed:
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
