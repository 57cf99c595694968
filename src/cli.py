#!/usr/bin/env python3
"""Command Line Interface for the Salón Sandra Fajardo backend.

Usage:
    cd src
    python cli.py server       # Start API server
    python cli.py info         # Show configuration
    python cli.py check-db     # Probe the database connection
"""
from __future__ import annotations

import json
from typing import Optional

import typer
import uvicorn

from core.config import get_settings
from core.db import create_pool, dispose_pool, probe_database
from core.logging_config import get_logger, setup_logging

LOGGER = get_logger(__name__)
SETTINGS = get_settings()

app = typer.Typer(help="Salón Sandra Fajardo backend CLI")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Salón Sandra Fajardo - store and booking API."""
    log_level = "DEBUG" if verbose else SETTINGS.log_level
    setup_logging(level=log_level, log_file=SETTINGS.log_file, json_format=SETTINGS.log_format == "json")


@app.command("server")
def run_server(
    host: Optional[str] = typer.Option(None, help="Host to bind to (default: HOST)"),
    port: Optional[int] = typer.Option(None, help="Port to bind to (default: PORT)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    bind_host = host or SETTINGS.host
    bind_port = port or SETTINGS.port
    typer.echo(f"Starting API server on {bind_host}:{bind_port}...")
    uvicorn.run(
        "api.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_config=None,  # keep setup_logging() handlers
    )


@app.command("info")
def show_info() -> None:
    """Show the active (non-secret) configuration."""
    typer.echo(json.dumps(SETTINGS.describe(), indent=2))


@app.command("check-db")
def check_db() -> None:
    """Open one pooled connection and run SELECT 1."""
    engine = create_pool(SETTINGS)
    try:
        result = probe_database(engine)
    finally:
        dispose_pool(engine)

    if result["status"] == "ok":
        typer.secho(f"✓ Connected to {result['database_url']}", fg="green")
        return

    typer.secho(f"✗ Cannot connect to {result['database_url']}: {result['error']}", fg="red")
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
