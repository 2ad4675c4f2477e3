"""Tema - theme inheritance and template resolution engine.

Tema locates template implementations across a tree of themes, runs the
themes' preprocessing hooks over the render data and renders the result.
Composite documents are described as trees of elements and rendered
recursively into a single string.

Core ideas:
- Themes extend parent themes; options and locals flow from root to leaf
- Template suggestions let hooks ask for more specific templates
- Blocks let nested templates pass fragments up to wrapper templates
"""

from tema.engine import Tema
from tema.exceptions import TemaError, TemplateNotFoundError
from tema.models import Element, Theme

__version__ = "0.3.0"
__author__ = "Tema Contributors"

__all__ = [
    "Tema",
    "Theme",
    "Element",
    "TemaError",
    "TemplateNotFoundError",
]
