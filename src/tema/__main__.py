"""Entry point for running Tema as a module.

Usage:
    python -m tema [command] [options]

Example:
    python -m tema render page --var title=Hello
    python -m tema tree docs/page.yaml
"""

from tema.cli import app

if __name__ == "__main__":
    app()
