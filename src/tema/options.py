"""Engine options.

Options are read and written through ``Tema.option``. Only the keys below are
accepted; ``theme``, ``default_theme`` and ``cache`` have side effects on the
engine and are applied by it.
"""

from dataclasses import dataclass, field, fields
from typing import Any

from tema.models.theme import Theme

# Applied after every other key in a bulk update, so options that influence
# tree composition are already in place when the theme is set.
THEME_KEY = "theme"


@dataclass
class EngineOptions:
    """Live options of one engine.

    Attributes:
        path: Directory relative template paths start from
        default_to_plain: Return template files verbatim instead of compiling them
        autoescape: Enable Jinja2 autoescaping for compiled templates
        locals: Variables merged into every render
        cache: False, True, a maximum weight or a cache settings mapping
        theme: Active theme declaration
        default_theme: Fallback theme placed at the root of every tree
        element_types: Element type definitions by type name
    """

    path: str = "./"
    default_to_plain: bool = True
    autoescape: bool = False
    locals: dict[str, Any] = field(default_factory=dict)
    cache: Any = False
    theme: Theme | None = None
    default_theme: Theme | None = None
    element_types: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def ordered_items(cls, values: dict[str, Any]) -> list[tuple[str, Any]]:
        """Order a bulk update so the theme is applied last."""
        items = [(k, v) for k, v in values.items() if k != THEME_KEY]
        if THEME_KEY in values:
            items.append((THEME_KEY, values[THEME_KEY]))
        return items
