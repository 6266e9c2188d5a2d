"""Entry point for ``python -m dpccompare``."""

from dpccompare.cli.typer_app import app

if __name__ == "__main__":
    app()
