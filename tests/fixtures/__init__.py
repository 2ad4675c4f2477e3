"""Test fixtures for Tema.

This package provides a sample site and hook functions for configuration
and CLI tests.

Sample Site:
- site/tema.yaml: Two themes, ``site`` extending ``base``
- site/themes: Template files of both themes
- site/tree.yaml: An element tree using the site's element types
"""

from pathlib import Path

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

# Path to the sample site
SITE_DIR = FIXTURES_DIR / "site"

# Import prefix of the hook functions referenced from configuration files
HOOKS_MODULE = "tests.fixtures.hooks"


def hook_reference(name: str) -> str:
    """Get the import reference of a fixture hook.

    Args:
        name: Name of a function in tests/fixtures/hooks.py

    Returns:
        Reference in "package.module:attribute" form
    """
    return f"{HOOKS_MODULE}:{name}"
