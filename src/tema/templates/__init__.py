"""Template resolution and default rendering.

- resolver: Finds the theme and template source for a template name
- renderer: Reads template files and renders them with Jinja2
"""

from tema.templates.renderer import DefaultRenderer, TemplateCompiler
from tema.templates.resolver import TemplateResolver, template_file_name

__all__ = [
    "DefaultRenderer",
    "TemplateCompiler",
    "TemplateResolver",
    "template_file_name",
]
