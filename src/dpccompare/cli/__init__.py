"""dpccompare command-line interface."""

from dpccompare.cli.typer_app import app

__all__ = ["app"]
