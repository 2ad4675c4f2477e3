"""Theme tree composition.

Following ``parent`` links from the active theme gives the chain of themes
it extends. The chain is turned into a finite list of ThemeInstances, root
first, with options, locals and element types inherited from root to leaf.

Parent links are followed by identity. A link back to a theme already in the
chain is dropped (on the instance, never on the declaration) and reported as
a warning; the truncated tree is still usable.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from tema.models.theme import Theme, ThemeInstance

logger = logging.getLogger(__name__)


@dataclass
class ThemeTree:
    """Ordered theme instances of one engine.

    Attributes:
        theme: The declaration the tree was built for (the leaf)
        default_theme: Fallback declaration placed at the root, if any
        instances: Theme instances, root first
        public_paths: Public asset paths, leaf first, each ending with "/"
    """

    theme: Theme
    default_theme: Theme | None = None
    instances: list[ThemeInstance] = field(default_factory=list)
    public_paths: list[str] = field(default_factory=list)

    @property
    def leaf(self) -> ThemeInstance:
        return self.instances[-1]

    @property
    def root(self) -> ThemeInstance:
        return self.instances[0]

    def leaf_first(self) -> list[ThemeInstance]:
        return list(reversed(self.instances))

    def get_instance(self, theme: Theme) -> ThemeInstance | None:
        for instance in self.instances:
            if instance.is_instance_of(theme):
                return instance
        return None

    def __len__(self) -> int:
        return len(self.instances)

    def __iter__(self):
        return iter(self.instances)


def _collect_chain(theme: Theme, diagnostics: logging.Logger) -> list[ThemeInstance]:
    """Walk parent links upward and return instances root first."""
    leaf = ThemeInstance(theme=theme)
    chain = [leaf]
    seen = {id(theme)}

    current = leaf
    while current.theme.parent is not None:
        parent = current.theme.parent
        if id(parent) in seen:
            diagnostics.warning(
                "Circular theme parentage: %s extends %s which is already in the theme tree; "
                "ignoring the link",
                current.label,
                parent.label,
            )
            break
        seen.add(id(parent))
        instance = ThemeInstance(theme=parent)
        current.parent = instance
        chain.append(instance)
        current = instance

    chain.reverse()
    return chain


def _normalize_public_path(path: str) -> str:
    return path if path.endswith("/") else path + "/"


def build_theme_tree(
    theme: Theme,
    default_theme: Theme | None = None,
    owner: Any = None,
    diagnostics: logging.Logger | None = None,
) -> ThemeTree:
    """Compose the theme tree for ``theme``.

    Args:
        theme: The active theme declaration
        default_theme: Fallback theme placed at the root of the tree
        owner: Engine passed to each theme's ``initialize_theme`` hook
        diagnostics: Logger receiving warnings (defaults to this module's logger)

    Returns:
        The composed ThemeTree
    """
    diagnostics = diagnostics or logger
    instances = _collect_chain(theme, diagnostics)

    if default_theme is not None and not any(i.is_instance_of(default_theme) for i in instances):
        default_instance = ThemeInstance(theme=default_theme)
        instances[0].parent = default_instance
        instances.insert(0, default_instance)

    tree = ThemeTree(theme=theme, default_theme=default_theme, instances=instances)

    for instance in instances:
        instance.inherit()
        if instance.public_path:
            tree.public_paths.insert(0, _normalize_public_path(instance.public_path))
        if instance.theme.initialize_theme is not None:
            instance.theme.initialize_theme(owner)

    logger.debug(
        "Built theme tree: %s",
        " > ".join(instance.label for instance in instances),
    )
    return tree
