"""Template resolution across template suggestions and the theme tree.

Suggestions are tried last first: hooks append suggestions as they learn
more about what is being rendered, so later suggestions are more specific.
Each suggestion is tried against every theme, leaf to root, before falling
back to the previous one. The first hit wins:

    suggestions: [foo_bar, bar_foo]   themes: [child, parent]

    bar_foo @ child -> bar_foo @ parent -> foo_bar @ child -> foo_bar @ parent

A theme matches when its ``templates`` mapping names the suggestion, or when
its template directory holds a file for it. Themes without a template
directory are skipped without touching the file system.
"""

import logging
import posixpath
from pathlib import Path
from typing import Any

from tema.cache import MISSING, TemplateCache
from tema.exceptions import TemplateNotFoundError
from tema.filesystem import FileSystem
from tema.models.request import TemplateMatch
from tema.models.theme import ThemeInstance
from tema.options import EngineOptions

logger = logging.getLogger(__name__)

TEMPLATE_KEY = "template"
TEMPLATE_FILES_KEY = "templateFiles"


def template_file_name(template: str, extension: str) -> str:
    """File name for a template: first underscore becomes a hyphen."""
    return f"{template.replace('_', '-', 1)}.{extension}"


def _file_sort_key(path: str) -> tuple[int, str]:
    # Shallow files first so a top-level template beats one in a subdirectory.
    return (path.count("/"), path)


class TemplateResolver:
    """Finds the theme and template source for a template name."""

    def __init__(
        self,
        options: EngineOptions,
        cache: TemplateCache,
        filesystem: FileSystem,
    ) -> None:
        """Initialize the resolver.

        Args:
            options: Engine options (``path`` is read live)
            cache: Engine cache for file listings and lookup results
            filesystem: File system the template directories live on
        """
        self.options = options
        self.cache = cache
        self.filesystem = filesystem

    async def list_template_files(self, template_path: str) -> list[str]:
        """Return the sorted template files of a theme directory.

        Paths keep the theme's ``template_path`` as prefix so they can be
        rendered relative to the engine's base path.
        """
        key = [TEMPLATE_FILES_KEY, template_path]
        files = self.cache.get(key)
        if files is not MISSING:
            return files

        root = Path(self.options.path) / template_path
        listed = await self.filesystem.list_files(root)
        files = sorted(
            (posixpath.join(template_path, entry) for entry in listed),
            key=_file_sort_key,
        )
        self.cache.set(key, files)
        logger.debug("Listed %d template files in %s", len(files), root)
        return files

    async def template_file_exists(self, theme: ThemeInstance, template: str) -> str | None:
        """Look for a template file in a theme's template directory.

        Args:
            theme: Theme instance with a ``template_path``
            template: Template name

        Returns:
            Path of the matching file, or None
        """
        template_path = theme.template_path or ""
        name = template_file_name(template, theme.template_extension)

        key = [TEMPLATE_KEY, template_path, name]
        cached = self.cache.get(key)
        if cached is not MISSING:
            return cached or None

        files = await self.list_template_files(template_path)
        suffix = "/" + name
        match: Any = next(
            (entry for entry in files if entry == name or entry.endswith(suffix)),
            False,
        )
        self.cache.set(key, match)
        return match or None

    async def find_template(
        self,
        template: str,
        variables: dict[str, Any] | None,
        themes: list[ThemeInstance],
    ) -> TemplateMatch:
        """Resolve ``template`` against ``themes``.

        Args:
            template: Primary template name
            variables: Variables, possibly holding ``template_suggestions``
            themes: Theme instances to search, leaf first

        Returns:
            The matching theme instance and template source

        Raises:
            TemplateNotFoundError: If no suggestion matches any theme
        """
        suggestions = [template, *((variables or {}).get("template_suggestions") or [])]
        for suggestion in reversed(suggestions):
            for theme in themes:
                source = theme.templates.get(suggestion)
                if source:
                    logger.debug("Template %s: inline in theme %s", suggestion, theme.label)
                    return TemplateMatch(theme=theme, to_render=source)

                if not theme.template_path:
                    continue

                path = await self.template_file_exists(theme, suggestion)
                if path:
                    logger.debug("Template %s: %s from theme %s", suggestion, path, theme.label)
                    return TemplateMatch(theme=theme, to_render=path)

        raise TemplateNotFoundError(template, suggestions)
