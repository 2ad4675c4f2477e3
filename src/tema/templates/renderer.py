"""Default template rendering.

Template files are read through the engine's file system and either returned
verbatim (``default_to_plain``) or compiled as Jinja2 templates and rendered
with the request's variables.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from jinja2 import Environment

from tema.filesystem import FileSystem
from tema.options import EngineOptions

logger = logging.getLogger(__name__)


class TemplateCompiler:
    """Compiles template text into render functions.

    Usage:
        compile_template = TemplateCompiler()
        render = compile_template("{{ name }} Anka")
        render({"name": "Kalle"})  # "Kalle Anka"
    """

    def __init__(self, autoescape: bool = False) -> None:
        self.autoescape = autoescape
        self._env = Environment(
            autoescape=autoescape,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def __call__(self, text: str) -> Callable[[dict[str, Any]], str]:
        template = self._env.from_string(text)

        def render(variables: dict[str, Any]) -> str:
            return template.render(variables)

        return render


class DefaultRenderer:
    """Renders template files when a theme has no renderer of its own."""

    def __init__(self, options: EngineOptions, filesystem: FileSystem) -> None:
        """Initialize the renderer.

        Args:
            options: Engine options (path, default_to_plain and autoescape are read live)
            filesystem: Where template files are read from
        """
        self.options = options
        self.filesystem = filesystem
        self._compiler: TemplateCompiler | None = None

    @property
    def compiler(self) -> TemplateCompiler:
        if self._compiler is None or self._compiler.autoescape != self.options.autoescape:
            self._compiler = TemplateCompiler(autoescape=self.options.autoescape)
        return self._compiler

    async def render(self, file: str, variables: dict[str, Any]) -> str:
        """Render the template file at ``file``.

        Args:
            file: Template path relative to the engine's base path
            variables: Variables available to the template

        Returns:
            Rendered text

        Raises:
            OSError: If the file cannot be read
        """
        text = await self.filesystem.read_text(Path(self.options.path) / file)

        if self.options.default_to_plain:
            return text

        rendered = self.compiler(text)(variables)
        logger.debug("Rendered %s (%d characters)", file, len(rendered))
        return rendered
