"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from ..config import Config
from ..db.connection import close_connection_pool
from ..logging_setup import setup_logging
from .clusters import clusters_app
from .init import init_command
from .items import items_app

app = typer.Typer(
    name="clusterideas",
    help="Cluster Ideas - user-defined record schemas for personal notes",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
) -> None:
    """Configure logging before any command runs."""
    ctx.call_on_close(close_connection_pool)
    level = "DEBUG"
    if not verbose:
        try:
            level = Config().config.log_level
        except (FileNotFoundError, ValueError):
            level = "WARNING"
    setup_logging(level)


# Register commands
app.command("init")(init_command)
app.add_typer(clusters_app, name="clusters", help="Manage clusters and their fields")
app.add_typer(items_app, name="items", help="Manage the items of a cluster")


if __name__ == "__main__":
    app()
