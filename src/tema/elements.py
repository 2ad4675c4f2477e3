"""Recursive rendering of element trees.

For every element, in order:

1. give the element its own block context
2. merge in the global element type definition, then the theme's override
3. normalize list fields
4. run pre renders, one after another
5. render the template, or else every child concurrently
6. merge the children's block contexts into the element's, join their output
7. apply template wrappers, one after another
8. run post renders, one after another
9. add prefix and suffix

Failures stay inside the element that caused them: a template that cannot be
found or a hook that raises turns that element's content into an empty
string, and a missing wrapper leaves the content unwrapped. A child that is
not an element at all renders as nothing. Siblings keep rendering either way.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from tema.blocks import BlockContext, merge_blocks
from tema.exceptions import TemplateNotFoundError
from tema.models.element import Element
from tema.utils.hooks import call_hook

if TYPE_CHECKING:
    from tema.engine import Tema


class ElementRenderer:
    """Renders element trees through an engine."""

    def __init__(self, engine: "Tema", diagnostics: logging.Logger) -> None:
        self.engine = engine
        self.diagnostics = diagnostics

    async def render(self, element: Element | Mapping[str, Any]) -> str:
        content, _ = await self._render_node(element)
        return content

    def _apply_type(self, element: Element) -> None:
        if not element.type:
            return
        definition = self.engine.options.element_types.get(element.type)
        if definition:
            element.merge(definition)
        theme = self.engine.theme
        if theme is not None:
            override = theme.element_types.get(element.type)
            if override:
                element.merge(override)

    async def _pre_render(self, element: Element) -> Element:
        for hook in element.pre_renders:
            result = await call_hook(hook, element)
            if result is not None and result is not element:
                context = element.render_context
                element = Element.coerce(result)
                if not isinstance(element.render_context, dict) or not element.render_context:
                    element.render_context = context
            element.normalize()
        return element

    async def _render_children(self, element: Element) -> str:
        results = await asyncio.gather(*(self._render_node(child) for child in element.children))

        for _, context in results:
            merge_blocks(element.render_context, context)
        return "".join(content for content, _ in results)

    async def _wrap(self, element: Element, content: str) -> str:
        for wrapper in element.template_wrappers:
            extra = element.get("variables")
            variables = {**(extra if isinstance(extra, Mapping) else {}), "element": element, "content": content}
            try:
                content = await self.engine.render(wrapper, variables, element.render_context)
            except TemplateNotFoundError:
                self.diagnostics.warning("Template wrapper not found: %s (content left unwrapped)", wrapper)
            except Exception as e:
                self.diagnostics.warning("Template wrapper %s failed: %s", wrapper, e, exc_info=True)
        return content

    async def _post_render(self, element: Element, content: str) -> str:
        for hook in element.post_renders:
            try:
                result = await call_hook(hook, content, element)
            except Exception as e:
                self.diagnostics.error("Post render of %s failed: %s", _describe(element), e, exc_info=True)
                return ""
            if result is not None:
                content = str(result)
        return content

    async def _render_node(self, node: Any) -> tuple[str, BlockContext]:
        try:
            element = Element.coerce(node)
        except TypeError as e:
            self.diagnostics.error("Skipping element: %s", e)
            return "", {}

        if not isinstance(element.render_context, dict):
            element.render_context = {}
        self._apply_type(element)
        element.normalize()

        try:
            element = await self._pre_render(element)
            if element.template:
                content = await self.engine.render(
                    element.template,
                    element.as_variables(),
                    element.render_context,
                )
            else:
                content = await self._render_children(element)
        except TemplateNotFoundError as e:
            self.diagnostics.warning("Skipping %s: %s", _describe(element), e)
            content = ""
        except Exception as e:
            self.diagnostics.error("Rendering %s failed: %s", _describe(element), e, exc_info=True)
            content = ""

        content = await self._wrap(element, content)
        content = await self._post_render(element, content)
        return f"{element.prefix or ''}{content}{element.suffix or ''}", element.render_context


def _describe(element: Element) -> str:
    if element.template:
        return f"element with template {element.template!r}"
    if element.type:
        return f"element of type {element.type!r}"
    return "element"
