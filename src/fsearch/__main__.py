"""Entry point for ``python -m fsearch``."""

from fsearch.cli import app

if __name__ == "__main__":
    app()
