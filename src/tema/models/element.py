"""Render tree elements.

An element is either a leaf that names a template or a branch with children.
Either kind can carry template wrappers and pre/post render hooks. Keys the
renderer does not know about are kept in ``extra`` and exposed to templates
as top-level variables, so type-specific data can ride along freely:

    {"type": "car", "model": "P1800", "children": [...]}
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tema.blocks import BlockContext

ELEMENT_FIELDS = (
    "type",
    "template",
    "children",
    "template_wrappers",
    "pre_renders",
    "post_renders",
    "prefix",
    "suffix",
    "render_context",
)

_LIST_FIELDS = ("pre_renders", "template_wrappers", "children", "post_renders")


@dataclass(eq=False)
class Element:
    """One node of a render tree.

    Attributes:
        type: Registered element type merged into the element before rendering
        template: Template rendered with the element as its variables
        children: Child elements, rendered when there is no template
        template_wrappers: Templates that wrap the element's content, in order
        pre_renders: Hooks ``(element) -> element`` run before rendering
        post_renders: Hooks ``(content, element) -> content`` run last
        prefix: Text placed before the final content
        suffix: Text placed after the final content
        render_context: The element's own block context
        extra: Every other key of the element
    """

    type: str | None = None
    template: str | None = None
    children: list[Any] = field(default_factory=list)
    template_wrappers: list[str] = field(default_factory=list)
    pre_renders: list[Callable[..., Any]] = field(default_factory=list, repr=False)
    post_renders: list[Callable[..., Any]] = field(default_factory=list, repr=False)
    prefix: str = ""
    suffix: str = ""
    render_context: BlockContext = field(default_factory=dict, repr=False)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Element":
        element = cls()
        element.merge(data)
        return element

    @classmethod
    def coerce(cls, value: Any) -> "Element":
        """Turn a mapping into an Element; Elements pass through unchanged."""
        if isinstance(value, Element):
            return value
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        raise TypeError(f"Cannot build an element from {type(value).__name__}")

    def merge(self, overrides: Mapping[str, Any]) -> "Element":
        """Apply ``overrides`` on top of the element, in place.

        Dicts and lists are copied, so rendering never writes back into a
        shared definition such as a registered element type.
        """
        for key, value in overrides.items():
            value = _copied(value)
            if key in ELEMENT_FIELDS:
                setattr(self, key, value)
            else:
                self.extra[key] = value
        return self

    def normalize(self) -> None:
        """Make sure list fields are lists and the render context is a dict."""
        if not isinstance(self.render_context, dict):
            self.render_context = {}
        for name in _LIST_FIELDS:
            value = getattr(self, name)
            if value is None:
                value = []
            elif isinstance(value, tuple):
                value = list(value)
            elif not isinstance(value, list):
                value = [value]
            setattr(self, name, value)

    def get(self, key: str, default: Any = None) -> Any:
        if key in ELEMENT_FIELDS:
            return getattr(self, key)
        return self.extra.get(key, default)

    def __getitem__(self, key: str) -> Any:
        if key in ELEMENT_FIELDS:
            return getattr(self, key)
        return self.extra[key]

    def as_variables(self) -> dict[str, Any]:
        """Variables a leaf template sees: every extra key plus the basics."""
        return {
            **self.extra,
            "type": self.type,
            "template": self.template,
            "children": self.children,
            "prefix": self.prefix,
            "suffix": self.suffix,
        }



def _copied(value: Any) -> Any:
    """Copy nested dicts and lists; anything else is shared."""
    if isinstance(value, dict):
        return {key: _copied(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_copied(item) for item in value]
    return value
