"""Theme declarations and their per-engine instances.

A Theme is what callers declare: template sources, hooks, options and an
optional parent theme. Engines never mutate declarations. When a theme tree
is built each declaration gets a ThemeInstance layered on top of it holding
the computed, inherited values, so one declaration can be shared by many
engines without them corrupting each other.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

# A template is either an inline function (variables -> str or awaitable str)
# or a file path, relative to the engine's base path.
TemplateSource = Callable[..., Any] | str
Hook = Callable[..., Any]

DEFAULT_TEMPLATE_EXTENSION = "html"


@dataclass(eq=False)
class Theme:
    """A named bundle of templates, hooks and configuration.

    Attributes:
        name: Human-readable identifier used in diagnostics
        parent: Theme this one extends
        template_path: Directory searched for template files
        public_path: Directory holding the theme's public assets
        templates: Inline templates or explicit file paths by template name
        preprocessor: Hook run for every template, receives the RenderRequest
        processor: Hook run for every template after all preprocessors
        preprocessors: Hooks by template name, receive the variables dict
        processors: Hooks by template name, receive the variables dict
        options: Inherited options (renderer, template_extension, ...)
        locals: Inherited variables merged into every render
        element_types: Inherited element type overrides
        initialize_theme: Called with the engine whenever a tree is built
    """

    name: str | None = None
    parent: "Theme | None" = field(default=None, repr=False)
    template_path: str | None = None
    public_path: str | None = None
    templates: dict[str, TemplateSource] = field(default_factory=dict, repr=False)
    preprocessor: Hook | None = field(default=None, repr=False)
    processor: Hook | None = field(default=None, repr=False)
    preprocessors: dict[str, Hook] = field(default_factory=dict, repr=False)
    processors: dict[str, Hook] = field(default_factory=dict, repr=False)
    options: dict[str, Any] = field(default_factory=dict)
    locals: dict[str, Any] = field(default_factory=dict)
    element_types: dict[str, Mapping[str, Any]] = field(default_factory=dict, repr=False)
    initialize_theme: Hook | None = field(default=None, repr=False)

    @property
    def label(self) -> str:
        return self.name or f"<theme {id(self):#x}>"


@dataclass(eq=False)
class ThemeInstance:
    """A theme as placed in one engine's theme tree.

    Declared fields are read through from the Theme; inherited fields are
    computed when the tree is built.
    """

    theme: Theme
    parent: "ThemeInstance | None" = field(default=None, repr=False)
    options: dict[str, Any] = field(default_factory=dict)
    locals: dict[str, Any] = field(default_factory=dict)
    element_types: dict[str, Mapping[str, Any]] = field(default_factory=dict, repr=False)

    def inherit(self) -> None:
        """Recompute inherited values from the parent instance."""
        inherited = self.parent
        self.options = {**(inherited.options if inherited else {}), **self.theme.options}
        self.locals = {**(inherited.locals if inherited else {}), **self.theme.locals}
        self.element_types = {
            **(inherited.element_types if inherited else {}),
            **self.theme.element_types,
        }

    def is_instance_of(self, theme: Theme) -> bool:
        return self.theme is theme

    @property
    def name(self) -> str | None:
        return self.theme.name

    @property
    def label(self) -> str:
        return self.theme.label

    @property
    def template_path(self) -> str | None:
        return self.theme.template_path

    @property
    def public_path(self) -> str | None:
        return self.theme.public_path

    @property
    def templates(self) -> dict[str, TemplateSource]:
        return self.theme.templates

    @property
    def preprocessor(self) -> Hook | None:
        return self.theme.preprocessor

    @property
    def processor(self) -> Hook | None:
        return self.theme.processor

    @property
    def preprocessors(self) -> dict[str, Hook]:
        return self.theme.preprocessors

    @property
    def processors(self) -> dict[str, Hook]:
        return self.theme.processors

    @property
    def template_extension(self) -> str:
        return self.options.get("template_extension") or DEFAULT_TEMPLATE_EXTENSION

    @property
    def renderer(self) -> Hook | None:
        return self.options.get("renderer")
