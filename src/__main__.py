"""Allow ``python -m src`` to run the forwarder CLI."""

from src.cli.main import cli

cli()
