"""Tema data models.

- Theme: A caller-declared theme
- ThemeInstance: A theme as placed in one engine's theme tree
- Element: One node of a render tree
- RenderRequest: A template invocation moving through preprocessing
- TemplateMatch: The theme and template source chosen by resolution
"""

from tema.models.element import Element
from tema.models.request import RenderRequest, TemplateMatch
from tema.models.theme import Theme, ThemeInstance

__all__ = [
    "Theme",
    "ThemeInstance",
    "Element",
    "RenderRequest",
    "TemplateMatch",
]
