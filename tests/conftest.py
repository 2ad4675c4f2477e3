"""Shared pytest fixtures for Tema tests.

Fixtures are organized by category:
- File system fixtures: Template directories written to tmp_path
- Theme fixtures: A parent/child theme pair with recording hooks
- Engine fixtures: Engines wired to the temporary template root
"""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from tema import Tema, Theme
from tema.filesystem import LocalFileSystem
from tema.models import RenderRequest
from tema.utils.logging import DiagnosticsCollector

# =============================================================================
# File System Fixtures
# =============================================================================


class CountingFileSystem(LocalFileSystem):
    """LocalFileSystem that records every call made to it."""

    def __init__(self) -> None:
        super().__init__()
        self.listed: list[str] = []
        self.read: list[str] = []

    async def list_files(self, root: str | Path) -> list[str]:
        self.listed.append(str(root))
        return await super().list_files(root)

    async def read_text(self, path: str | Path) -> str:
        self.read.append(str(path))
        return await super().read_text(path)


def write_files(root: Path, files: dict[str, str]) -> None:
    """Write ``files`` (relative path -> content) below ``root``."""
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """Template root holding one template for the parent and simple themes."""
    write_files(
        tmp_path,
        {
            "parentTheme/foo-bar.html": "abc123",
            "simpleTheme/foo-bar.html": "xyz789",
        },
    )
    return tmp_path


@pytest.fixture
def add_templates(template_root: Path) -> Callable[[dict[str, str]], None]:
    """Write more templates (or replace existing ones) below the template root."""

    def add(files: dict[str, str]) -> None:
        write_files(template_root, files)

    return add


@pytest.fixture
def base_path(template_root: Path) -> str:
    """Engine ``path`` option pointing at the template root."""
    return f"{template_root}/"


@pytest.fixture
def filesystem() -> CountingFileSystem:
    return CountingFileSystem()


# =============================================================================
# Diagnostics Fixtures
# =============================================================================


@pytest.fixture
def diagnostics(request: pytest.FixtureRequest) -> Iterator[DiagnosticsCollector]:
    """Collector for the diagnostics of engines built from ``engine_logger``."""
    collector = DiagnosticsCollector()
    yield collector
    logging.getLogger(f"tests.{request.node.name}").removeHandler(collector)


@pytest.fixture
def engine_logger(diagnostics: DiagnosticsCollector, request: pytest.FixtureRequest) -> logging.Logger:
    return diagnostics.attach(f"tests.{request.node.name}")


# =============================================================================
# Theme Fixtures
# =============================================================================


@pytest.fixture
def calls() -> list[str]:
    """Names of hooks in the order they ran."""
    return []


def _bump(variables: dict[str, Any]) -> int:
    variables["order"] = variables.get("order", 0) + 1
    return variables["order"]


def recording_hook(name: str, calls: list[str]) -> Callable[[Any], Any]:
    """Hook that counts and records itself, for either hook signature."""

    def hook(data: Any) -> Any:
        calls.append(name)
        if isinstance(data, RenderRequest):
            _bump(data.variables)
        else:
            _bump(data)
        return data

    hook.__name__ = name
    return hook


def suggesting_hook(name: str, calls: list[str]) -> Callable[[dict[str, Any]], dict[str, Any]]:
    """Per-template hook that also appends a ``bar_foo_<order>`` suggestion."""

    def hook(variables: dict[str, Any]) -> dict[str, Any]:
        calls.append(name)
        order = _bump(variables)
        variables.setdefault("template_suggestions", []).append(f"bar_foo_{order}")
        return variables

    hook.__name__ = name
    return hook


@pytest.fixture
def parent_theme(calls: list[str]) -> Theme:
    return Theme(
        name="parent",
        template_path="parentTheme/",
        public_path="parentTheme/public/",
        preprocessor=recording_hook("parent.preprocessor", calls),
        processor=recording_hook("parent.processor", calls),
        preprocessors={"foo_bar": suggesting_hook("parent.preprocessors.foo_bar", calls)},
        processors={"foo_bar": recording_hook("parent.processors.foo_bar", calls)},
    )


@pytest.fixture
def sub_theme(parent_theme: Theme, calls: list[str]) -> Theme:
    return Theme(
        name="child",
        parent=parent_theme,
        template_path="subTheme/",
        public_path="subTheme/public",
        preprocessor=recording_hook("child.preprocessor", calls),
        processor=recording_hook("child.processor", calls),
        preprocessors={"foo_bar": recording_hook("child.preprocessors.foo_bar", calls)},
        processors={"foo_bar": recording_hook("child.processors.foo_bar", calls)},
    )


@pytest.fixture
def simple_theme() -> Theme:
    return Theme(name="simple", template_path="simpleTheme/")


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def engine_complex(
    sub_theme: Theme,
    base_path: str,
    filesystem: CountingFileSystem,
    engine_logger: logging.Logger,
) -> Tema:
    """Engine with the child theme (and therefore its parent) active."""
    return Tema(theme=sub_theme, path=base_path, filesystem=filesystem, logger=engine_logger)


@pytest.fixture
def engine_simple(
    simple_theme: Theme,
    base_path: str,
    filesystem: CountingFileSystem,
    engine_logger: logging.Logger,
) -> Tema:
    """Engine with a single theme that has no hooks."""
    return Tema(theme=simple_theme, path=base_path, filesystem=filesystem, logger=engine_logger)
