"""Theme tree composition."""

from tema.themes.tree import ThemeTree, build_theme_tree

__all__ = ["ThemeTree", "build_theme_tree"]
