"""Data passed along the render pipeline."""

from dataclasses import dataclass, field
from typing import Any

from tema.blocks import BlockAccessor, BlockContext
from tema.models.theme import TemplateSource, ThemeInstance


@dataclass
class RenderRequest:
    """One template invocation as it moves through preprocessing.

    Global preprocessor and processor hooks receive and return this object.
    Per-template hooks only see ``variables``.

    Attributes:
        template: Primary template name
        variables: The caller's variables (a private copy)
        context: Block context of this render
        block: Accessor bound to ``context``
    """

    template: str
    variables: dict[str, Any] = field(default_factory=dict)
    context: BlockContext = field(default_factory=dict, repr=False)
    block: BlockAccessor | None = field(default=None, repr=False)

    @property
    def suggestions(self) -> list[str]:
        """Primary template name followed by any suggestions added by hooks."""
        return [self.template, *self.variables.get("template_suggestions", [])]


@dataclass
class TemplateMatch:
    """Outcome of template resolution.

    Attributes:
        theme: Theme instance that supplied the template
        to_render: Inline template function or path of the template file
    """

    theme: ThemeInstance
    to_render: TemplateSource

    @property
    def is_inline(self) -> bool:
        return callable(self.to_render)
