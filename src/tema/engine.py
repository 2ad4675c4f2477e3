"""The Tema engine.

Ties the pieces together for one configuration: the theme tree, the cache,
the template resolver and the renderers. A render runs

    preprocess -> find_template -> render_template

where the template found is either an inline function of a theme, a file
rendered by the theme's own renderer, or a file rendered by the default
Jinja2 renderer.

Usage:
    engine = Tema(theme=Theme(template_path="theme/"), default_to_plain=False)
    html = await engine.render("page", {"title": "Hello"})
"""

import logging
from collections.abc import Mapping
from typing import Any

from tema.blocks import context_method
from tema.cache import TemplateCache
from tema.elements import ElementRenderer
from tema.exceptions import InvalidOptionError
from tema.filesystem import FileSystem, LocalFileSystem
from tema.models.element import Element
from tema.models.request import RenderRequest, TemplateMatch
from tema.models.theme import Theme, ThemeInstance
from tema.options import EngineOptions
from tema.pipeline import preprocess
from tema.templates.renderer import DefaultRenderer
from tema.templates.resolver import TemplateResolver
from tema.themes.tree import ThemeTree, build_theme_tree
from tema.utils.hooks import call_hook
from tema.utils.logging import get_logger

_UNSET: Any = object()


class Tema:
    """Theme-aware template engine.

    Attributes:
        options: Live engine options
        cache: Cache shared by every render of this engine
        filesystem: File system templates are read from
        logger: Diagnostics sink of this engine
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        filesystem: FileSystem | None = None,
        logger: logging.Logger | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the engine.

        Args:
            options: Engine options (see EngineOptions)
            filesystem: File system to read templates from (local disk by default)
            logger: Logger receiving the engine's diagnostics
            **kwargs: Engine options given as keywords, applied after ``options``
        """
        self.options = EngineOptions()
        self.filesystem: FileSystem = filesystem or LocalFileSystem()
        self.logger = logger or get_logger("tema.engine")
        self.cache = TemplateCache()
        self.resolver = TemplateResolver(self.options, self.cache, self.filesystem)
        self.default_renderer = DefaultRenderer(self.options, self.filesystem)
        self._elements = ElementRenderer(self, self.logger)
        self._tree: ThemeTree | None = None

        self.option({**(options or {}), **kwargs})

    # =========================================================================
    # Options
    # =========================================================================

    def option(self, key: str | Mapping[str, Any], value: Any = _UNSET) -> Any:
        """Read or write engine options.

        ``option(key)`` returns the value, ``option(key, value)`` sets it and
        ``option(mapping)`` sets several at once, with ``theme`` applied last.
        Setters return the engine so calls can be chained.

        Raises:
            InvalidOptionError: If a key is not an engine option
        """
        if isinstance(key, Mapping):
            for name, item in EngineOptions.ordered_items(dict(key)):
                self._set_option(name, item)
            return self

        if key not in EngineOptions.names():
            raise InvalidOptionError(key)

        if value is _UNSET:
            return getattr(self.options, key)

        self._set_option(key, value)
        return self

    def _set_option(self, key: str, value: Any) -> None:
        if key not in EngineOptions.names():
            raise InvalidOptionError(key)

        if key == "theme":
            self.set_theme(value)
        elif key == "default_theme":
            self.options.default_theme = value
            self.rebuild_theme()
        elif key == "cache":
            self.cache.configure(value)
            self.options.cache = value
        elif key == "path":
            # Cached listings and lookups belong to the old root.
            self.options.path = value
            self.cache.clear()
        else:
            setattr(self.options, key, value)

    # =========================================================================
    # Themes
    # =========================================================================

    def set_theme(self, theme: Theme | None) -> "Tema":
        """Make ``theme`` the active theme and rebuild the theme tree."""
        if theme is not None and not isinstance(theme, Theme):
            raise InvalidOptionError("theme", f"Expected a Theme, got {type(theme).__name__}")

        self.options.theme = theme
        if theme is None:
            self._tree = None
            return self

        self._tree = build_theme_tree(
            theme,
            default_theme=self.options.default_theme,
            owner=self,
            diagnostics=self.logger,
        )
        return self

    def rebuild_theme(self) -> "Tema":
        """Rebuild the tree of the active theme; does nothing without one."""
        if self._tree is not None:
            self.set_theme(self._tree.theme)
        return self

    @property
    def theme(self) -> ThemeInstance | None:
        """Instance of the active (leaf) theme."""
        return self._tree.leaf if self._tree else None

    @property
    def theme_tree(self) -> list[ThemeInstance]:
        """Theme instances, root first."""
        return list(self._tree.instances) if self._tree else []

    def get_theme_instance(self, theme: Theme) -> ThemeInstance | None:
        """Return this engine's instance of a theme declaration, if it is in the tree."""
        return self._tree.get_instance(theme) if self._tree else None

    def get_public_paths(self) -> list[str]:
        """Public asset paths of the tree, leaf theme first."""
        return list(self._tree.public_paths) if self._tree else []

    # =========================================================================
    # Cache
    # =========================================================================

    def get_cache(self, key: str | list[str]) -> Any:
        return self.cache.get(key)

    def set_cache(self, key: str | list[str], value: Any) -> None:
        self.cache.set(key, value)

    # =========================================================================
    # Element types
    # =========================================================================

    def element_type(self, name: str, definition: Mapping[str, Any] | None = None) -> Any:
        """Read or register a global element type definition.

        Returns the definition when reading and the engine when registering.
        """
        if definition is None:
            return self.options.element_types.get(name)
        self.options.element_types[name] = definition
        return self

    # =========================================================================
    # Rendering
    # =========================================================================

    async def template_file_exists(self, theme: ThemeInstance, template: str) -> str | None:
        return await self.resolver.template_file_exists(theme, template)

    async def preprocess(
        self,
        template: str,
        variables: Any = None,
        context: Any = None,
    ) -> RenderRequest:
        """Run the theme tree's hooks for ``template`` over ``variables``."""
        return await preprocess(template, variables, context, self.theme_tree)

    async def find_template(self, template: str, variables: Mapping[str, Any] | None = None) -> TemplateMatch:
        """Find the theme and template source for ``template``.

        Raises:
            TemplateNotFoundError: If no theme supplies any suggestion
        """
        themes = list(reversed(self.theme_tree))
        return await self.resolver.find_template(template, dict(variables or {}), themes)

    async def render_template(self, request: RenderRequest, match: TemplateMatch) -> str:
        """Render a preprocessed request with the template that was found.

        Engine locals, then the theme's locals, are laid over the variables.
        The template gets a fresh block accessor but never the context itself.
        """
        payload = {**request.variables, **self.options.locals, **match.theme.locals}
        payload["block"] = context_method(request.context)

        if match.is_inline:
            result = await call_hook(match.to_render, payload)
        elif match.theme.renderer is not None:
            result = await call_hook(match.theme.renderer, match.to_render, payload)
        else:
            result = await self.default_renderer.render(match.to_render, payload)

        return "" if result is None else str(result)

    async def render(self, template: str, variables: Any = None, context: Any = None) -> str:
        """Render ``template`` with ``variables``.

        Args:
            template: Template name
            variables: Variables for the template (copied, never mutated)
            context: Block context shared with other renders

        Returns:
            Rendered text

        Raises:
            TemplateNotFoundError: If the template cannot be resolved
        """
        # The tree is captured once; a set_theme during this render does not affect it.
        instances = self.theme_tree
        request = await preprocess(template, variables, context, instances)
        match = await self.resolver.find_template(
            request.template,
            request.variables,
            list(reversed(instances)),
        )
        self.logger.debug("Rendering %s with theme %s", request.template, match.theme.label)
        return await self.render_template(request, match)

    async def recursive_render(self, element: Element | Mapping[str, Any]) -> str:
        """Render a tree of elements into one string. Never raises for a subtree."""
        return await self._elements.render(element)
