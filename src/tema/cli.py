"""Tema CLI interface.

Commands:
- render: Render one template with the configured theme
- tree: Render an element tree described in a YAML or JSON file
- find: Show which theme and template a name resolves to
- paths: List the public asset paths of the theme tree
- init: Write a default configuration file

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

import asyncio
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml

from tema import __version__
from tema.config import TemaConfig, create_default_config, create_engine, load_config
from tema.engine import Tema
from tema.exceptions import ConfigError, TemplateNotFoundError
from tema.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="tema",
    help="Theme inheritance and template resolution engine",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: TemaConfig | None = None
_logger = get_logger("tema.cli")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tema {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output with timestamps"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress info messages (warnings and errors only)"),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option("--ci", help="Enable CI mode with JSON log output"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Tema - render templates through a tree of themes."""
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug("Loaded config from: %s", _config.config_path)
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, yaml.YAMLError) as e:
        _logger.error("Failed to load config: %s", e)
        raise typer.Exit(1)


def _engine() -> Tema:
    """Create an engine from the loaded configuration or exit."""
    config = _config or TemaConfig()
    if config.theme is None:
        _logger.error("No theme configured. Set 'theme' in tema.yaml (see `tema init`)")
        raise typer.Exit(1)
    try:
        return create_engine(config)
    except ConfigError as e:
        _logger.error(str(e))
        raise typer.Exit(1)


def _parse_vars(pairs: list[str] | None, vars_file: Path | None) -> dict[str, Any]:
    variables: dict[str, Any] = {}

    if vars_file is not None:
        loaded = yaml.safe_load(vars_file.read_text(encoding="utf-8")) or {}
        if not isinstance(loaded, dict):
            _logger.error("Variables file must contain a mapping: %s", vars_file)
            raise typer.Exit(1)
        variables.update(loaded)

    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            _logger.error("Invalid --var %r, expected KEY=VALUE", pair)
            raise typer.Exit(1)
        variables[key] = value

    return variables


# =============================================================================
# render command
# =============================================================================


@app.command()
def render(
    template: Annotated[str, typer.Argument(help="Template name")],
    var: Annotated[
        list[str] | None,
        typer.Option("--var", help="Template variable as KEY=VALUE (repeatable)"),
    ] = None,
    vars_file: Annotated[
        Path | None,
        typer.Option("--vars", help="YAML or JSON file with template variables", exists=True, dir_okay=False),
    ] = None,
) -> None:
    """Render a template and print the result."""
    engine = _engine()
    variables = _parse_vars(var, vars_file)

    try:
        output = asyncio.run(engine.render(template, variables))
    except TemplateNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    typer.echo(output, nl=False)


# =============================================================================
# tree command
# =============================================================================


@app.command()
def tree(
    file: Annotated[
        Path,
        typer.Argument(help="YAML or JSON file describing the element tree", exists=True, dir_okay=False),
    ],
) -> None:
    """Render an element tree and print the result."""
    engine = _engine()

    try:
        element = yaml.safe_load(file.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        _logger.error("Failed to parse %s: %s", file, e)
        raise typer.Exit(1)

    if not isinstance(element, dict):
        _logger.error("Element tree must be a mapping: %s", file)
        raise typer.Exit(1)

    typer.echo(asyncio.run(engine.recursive_render(element)), nl=False)


# =============================================================================
# find command
# =============================================================================


@app.command()
def find(
    template: Annotated[str, typer.Argument(help="Template name")],
    suggest: Annotated[
        list[str] | None,
        typer.Option("--suggest", "-s", help="Additional template suggestion (repeatable)"),
    ] = None,
) -> None:
    """Show which theme and template a name resolves to."""
    engine = _engine()

    try:
        match = asyncio.run(engine.find_template(template, {"template_suggestions": suggest or []}))
    except TemplateNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    source = match.to_render
    artifact = f"inline {getattr(source, '__qualname__', source)!s}" if match.is_inline else source
    typer.echo(f"{match.theme.label}: {artifact}")


# =============================================================================
# paths command
# =============================================================================


@app.command()
def paths() -> None:
    """List public asset paths, most specific theme first."""
    for path in _engine().get_public_paths():
        typer.echo(path)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite existing config"),
    ] = False,
) -> None:
    """Write a default tema.yaml in the current directory."""
    config_file = Path("tema.yaml")

    if config_file.exists() and not force:
        _logger.error("Config already exists: %s", config_file)
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    typer.echo(f"Created {config_file}")
