"""Init command implementation."""

from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel

from ..config import ConfigModel, default_config_path, save_config
from ..db import init_database, validate_connection
from .common import console


def init_command(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to write (default: ~/.config/clusterideas/config.yaml)",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("clusterideas", "--db-name", help="Database name"),
    db_user: str = typer.Option("clusterideas", "--db-user", help="Database user"),
) -> None:
    """Initialize Cluster Ideas configuration and database."""
    console.print(Panel.fit("Cluster Ideas - Initialization", style="bold blue"))

    if config_path is None:
        config_path = default_config_path()

    try:
        config = ConfigModel(
            postgres={
                "host": db_host,
                "port": db_port,
                "database": db_name,
                "user": db_user,
                "password_env": "CLUSTERIDEAS_DB_PASSWORD",
            },
        )
    except ValueError as e:
        console.print(f"[red]❌ Invalid settings: {e}[/red]")
        raise typer.Exit(1)

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    console.print("\n[bold]Testing database connection...[/bold]")
    db_config = config.postgres.model_dump()

    if not validate_connection(db_config):
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: "
            "[bold]export CLUSTERIDEAS_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print("✅ Database connection successful")

    console.print("\n[bold]Initializing database schema...[/bold]")
    try:
        init_database(db_config)
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[green]✅ Cluster Ideas initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n\n"
            f"Next steps:\n"
            f"1. Create a cluster: [bold]clusterideas clusters create Books -f Title -f Author[/bold]\n"
            f"2. Add an item: [bold]clusterideas items add Books -v Title=Dune[/bold]",
            style="green",
        )
    )
