"""Allow ``python -m clusterideas``."""

from .cli.app import app

app()
