"""Tema configuration files.

Engines can be configured from YAML. Themes are declared by name, extend each
other through ``parent`` and reference their hooks as import strings:

    path: "./"
    default_to_plain: false
    cache: 500
    theme: child
    default_theme: base
    themes:
      base:
        template_path: "themes/base/"
      child:
        parent: base
        template_path: "themes/child/"
        preprocessor: "mysite.hooks:add_suggestions"

Supports environment variable substitution (${VAR}) in config values.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.tema/config.yaml
3. ./tema.yaml
"""

import importlib
import logging
import os
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from tema.cache import CacheSettings
from tema.engine import Tema
from tema.exceptions import ConfigError
from tema.models.theme import Theme

# "package.module:attribute"
IMPORT_REFERENCE = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$")

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class ThemeConfig:
    """A theme as declared in a configuration file.

    Attributes:
        parent: Name of the theme this one extends
        template_path: Directory searched for template files
        public_path: Directory of public assets
        templates: Template name -> file path or import reference
        options: Theme options (template_extension, renderer, ...)
        locals: Variables merged into renders using this theme
        element_types: Element type overrides
        preprocessor: Import reference of the global preprocessor
        processor: Import reference of the global processor
        preprocessors: Template name -> import reference
        processors: Template name -> import reference
        initialize_theme: Import reference of the initialization hook
    """

    parent: str | None = None
    template_path: str | None = None
    public_path: str | None = None
    templates: dict[str, str] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)
    locals: dict[str, Any] = field(default_factory=dict)
    element_types: dict[str, dict[str, Any]] = field(default_factory=dict)
    preprocessor: str | None = None
    processor: str | None = None
    preprocessors: dict[str, str] = field(default_factory=dict)
    processors: dict[str, str] = field(default_factory=dict)
    initialize_theme: str | None = None


@dataclass
class TemaConfig:
    """Top-level Tema configuration.

    Attributes:
        path: Directory relative template paths start from
        default_to_plain: Return template files verbatim
        autoescape: Enable Jinja2 autoescaping
        cache: False, True, a maximum weight or a cache settings mapping
        locals: Variables merged into every render
        theme: Name of the active theme
        default_theme: Name of the fallback theme
        themes: Theme declarations by name
        element_types: Global element type definitions
    """

    path: str = "./"
    default_to_plain: bool = True
    autoescape: bool = False
    cache: Any = False
    locals: dict[str, Any] = field(default_factory=dict)
    theme: str | None = None
    default_theme: str | None = None
    themes: dict[str, ThemeConfig] = field(default_factory=dict)
    element_types: dict[str, dict[str, Any]] = field(default_factory=dict)

    _config_path: Path | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate references between themes."""
        # Raises InvalidOptionError (a ValueError) for malformed values.
        CacheSettings.from_option(self.cache)

        for name in (self.theme, self.default_theme):
            if name is not None and name not in self.themes:
                raise ConfigError(f"Unknown theme: {name}. Declared: {sorted(self.themes)}")

        for name, theme in self.themes.items():
            if theme.parent is not None and theme.parent not in self.themes:
                raise ConfigError(f"Theme {name} extends unknown theme: {theme.parent}")

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute ${VAR} references with environment variables.

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ConfigError: If a referenced variable is not set
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ConfigError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.tema/config.yaml
    2. ./tema.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".tema" / "config.yaml",
        start_path / "tema.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def _load_theme_config(name: str, data: Any) -> ThemeConfig:
    if data is None:
        return ThemeConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Theme {name} must be a mapping, got {type(data).__name__}")

    known = set(ThemeConfig.__dataclass_fields__)
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown keys in theme {name}: {sorted(unknown)}")

    return ThemeConfig(**{key: value for key, value in data.items() if value is not None})


def load_config_from_dict(data: dict[str, Any]) -> TemaConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        TemaConfig instance
    """
    data = substitute_env_vars(data)

    themes = {
        str(name): _load_theme_config(str(name), theme_data)
        for name, theme_data in (data.get("themes") or {}).items()
    }

    return TemaConfig(
        path=data.get("path", "./"),
        default_to_plain=data.get("default_to_plain", True),
        autoescape=data.get("autoescape", False),
        cache=data.get("cache", False),
        locals=data.get("locals") or {},
        theme=data.get("theme"),
        default_theme=data.get("default_theme"),
        themes=themes,
        element_types=data.get("element_types") or {},
    )


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> TemaConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        TemaConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = TemaConfig()

    return config


# =============================================================================
# Building Engines
# =============================================================================


def import_reference(reference: str) -> Any:
    """Import the object named by a "package.module:attribute" string.

    Raises:
        ConfigError: If the module or attribute cannot be found
    """
    module_name, _, attribute = reference.partition(":")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import {module_name} (from {reference}): {e}") from e

    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ConfigError(f"{module_name} has no attribute {attribute} (from {reference})") from e
    return target


def _hook(reference: str | None) -> Callable[..., Any] | None:
    if reference is None:
        return None
    hook = import_reference(reference)
    if not callable(hook):
        raise ConfigError(f"Hook {reference} is not callable")
    return hook


def _template_source(source: str) -> Any:
    if IMPORT_REFERENCE.match(source):
        return _hook(source)
    return source


def build_themes(config: TemaConfig) -> dict[str, Theme]:
    """Turn the declared themes into Theme objects, wiring parents by name."""
    themes: dict[str, Theme] = {}

    for name, declared in config.themes.items():
        options = dict(declared.options)
        if isinstance(options.get("renderer"), str):
            options["renderer"] = _hook(options["renderer"])

        themes[name] = Theme(
            name=name,
            template_path=declared.template_path,
            public_path=declared.public_path,
            templates={key: _template_source(value) for key, value in declared.templates.items()},
            preprocessor=_hook(declared.preprocessor),
            processor=_hook(declared.processor),
            preprocessors={key: _hook(value) for key, value in declared.preprocessors.items()},
            processors={key: _hook(value) for key, value in declared.processors.items()},
            options=options,
            locals=dict(declared.locals),
            element_types=dict(declared.element_types),
            initialize_theme=_hook(declared.initialize_theme),
        )

    for name, declared in config.themes.items():
        if declared.parent is not None:
            themes[name].parent = themes[declared.parent]

    return themes


def create_engine(config: TemaConfig, logger: logging.Logger | None = None) -> Tema:
    """Create an engine configured from ``config``."""
    themes = build_themes(config)

    options: dict[str, Any] = {
        "path": config.path,
        "default_to_plain": config.default_to_plain,
        "autoescape": config.autoescape,
        "cache": config.cache,
        "locals": dict(config.locals),
        "element_types": dict(config.element_types),
        "default_theme": themes[config.default_theme] if config.default_theme else None,
        "theme": themes[config.theme] if config.theme else None,
    }
    return Tema(options, logger=logger)


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# Tema Configuration

# Directory relative template paths start from
path: "./"

# Return template files verbatim instead of rendering them with Jinja2
default_to_plain: false

# Cache template lookups: false, true or a maximum weight
cache: 500

# Variables available to every template
locals: {}

# Active theme and fallback theme (names from the themes section)
theme: site
default_theme: base

themes:
  base:
    template_path: "themes/base/"
    public_path: "themes/base/public/"
    options:
      template_extension: "html"
  site:
    parent: base
    template_path: "themes/site/"
    public_path: "themes/site/public/"
    # preprocessor: "mysite.hooks:preprocess"
    # preprocessors:
    #   page: "mysite.hooks:page_suggestions"

# Element types usable in element trees
element_types: {}
#   title:
#     template: title
'''
