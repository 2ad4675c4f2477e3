"""Unit tests for theme tree composition."""

import logging

import pytest

from tema import Tema, Theme
from tema.exceptions import InvalidOptionError
from tema.themes import build_theme_tree
from tema.utils.logging import DiagnosticsCollector


class TestBuildThemeTree:
    """Tests for build_theme_tree."""

    def test_root_first(self, sub_theme: Theme) -> None:
        """Test that instances are ordered from root to leaf."""
        tree = build_theme_tree(sub_theme)

        assert [instance.name for instance in tree] == ["parent", "child"]
        assert tree.leaf.theme is sub_theme
        assert tree.root.parent is None
        assert tree.leaf.parent is tree.root
        assert [instance.name for instance in tree.leaf_first()] == ["child", "parent"]

    def test_options_inherited(self, parent_theme: Theme, sub_theme: Theme) -> None:
        """Test that a child inherits its parent's options."""
        renderer = lambda file, variables: file  # noqa: E731
        parent_theme.options = {"renderer": renderer}

        tree = build_theme_tree(sub_theme)

        assert tree.leaf.renderer is renderer

    def test_options_overridden(self, parent_theme: Theme, sub_theme: Theme) -> None:
        """Test that a child's own option wins over the parent's."""
        parent_theme.options = {"renderer": lambda file, variables: "parent"}
        own = lambda file, variables: "child"  # noqa: E731
        sub_theme.options = {"renderer": own}

        tree = build_theme_tree(sub_theme)

        assert tree.leaf.renderer is own
        assert tree.root.renderer is not own

    def test_declarations_not_mutated(self, parent_theme: Theme, sub_theme: Theme) -> None:
        """Test that inheritance lives on the instances only."""
        parent_theme.options = {"template_extension": "txt"}
        parent_theme.locals = {"site": "Ankeborg"}

        tree = build_theme_tree(sub_theme)

        assert tree.leaf.template_extension == "txt"
        assert tree.leaf.locals == {"site": "Ankeborg"}
        assert sub_theme.options == {}
        assert sub_theme.locals == {}

    def test_locals_and_element_types_merge(self, parent_theme: Theme, sub_theme: Theme) -> None:
        """Test that locals and element types merge shallowly down the tree."""
        parent_theme.locals = {"a": 1, "b": 1}
        sub_theme.locals = {"b": 2}
        parent_theme.element_types = {"car": {"brand": "Saab"}}
        sub_theme.element_types = {"boat": {"brand": "Nimbus"}}

        tree = build_theme_tree(sub_theme)

        assert tree.leaf.locals == {"a": 1, "b": 2}
        assert set(tree.leaf.element_types) == {"car", "boat"}

    def test_default_template_extension(self, sub_theme: Theme) -> None:
        """Test the html extension default."""
        assert build_theme_tree(sub_theme).leaf.template_extension == "html"

    def test_circular_parentage_truncated(
        self,
        parent_theme: Theme,
        sub_theme: Theme,
        diagnostics: DiagnosticsCollector,
        engine_logger: logging.Logger,
    ) -> None:
        """Test that a parent cycle yields a finite tree and one warning."""
        parent_theme.parent = sub_theme

        tree = build_theme_tree(sub_theme, diagnostics=engine_logger)

        assert len(tree) == 2
        assert tree.root.parent is None
        assert len(diagnostics.warnings) == 1
        assert "Circular theme parentage" in diagnostics.warnings[0].getMessage()
        # The declaration keeps its link
        assert parent_theme.parent is sub_theme

    def test_self_parent(self, diagnostics: DiagnosticsCollector, engine_logger: logging.Logger) -> None:
        """Test that a theme extending itself is a tree of one."""
        theme = Theme(name="loop")
        theme.parent = theme

        tree = build_theme_tree(theme, diagnostics=engine_logger)

        assert len(tree) == 1
        assert len(diagnostics.warnings) == 1

    def test_public_paths_leaf_first(self, sub_theme: Theme) -> None:
        """Test public paths order and trailing slash."""
        tree = build_theme_tree(sub_theme)

        assert tree.public_paths == ["subTheme/public/", "parentTheme/public/"]

    def test_default_theme_at_root(self, simple_theme: Theme) -> None:
        """Test that the default theme becomes the root."""
        default = Theme(name="default")

        tree = build_theme_tree(simple_theme, default_theme=default)

        assert [instance.name for instance in tree] == ["default", "simple"]
        assert tree.leaf.parent is tree.root
        assert simple_theme.parent is None

    def test_default_theme_already_in_chain(self, parent_theme: Theme, sub_theme: Theme) -> None:
        """Test that a default theme already in the chain is not added twice."""
        tree = build_theme_tree(sub_theme, default_theme=parent_theme)

        assert [instance.name for instance in tree] == ["parent", "child"]

    def test_initialize_theme_called_with_owner(self, parent_theme: Theme, sub_theme: Theme) -> None:
        """Test that initialization hooks receive the owner."""
        seen: list[object] = []
        parent_theme.initialize_theme = seen.append
        owner = object()

        build_theme_tree(sub_theme, owner=owner)

        assert seen == [owner]


class TestEngineThemes:
    """Tests for the engine's theme API."""

    def test_theme_tree(self, engine_complex: Tema) -> None:
        """Test the engine's view of the tree."""
        assert [instance.name for instance in engine_complex.theme_tree] == ["parent", "child"]
        assert engine_complex.theme is engine_complex.theme_tree[-1]

    def test_option_returns_theme(self, engine_complex: Tema, sub_theme: Theme) -> None:
        """Test that the theme option gives back the declaration."""
        assert engine_complex.option("theme") is sub_theme

    def test_initialize_theme_on_set(self, parent_theme: Theme, sub_theme: Theme) -> None:
        """Test that themes are initialized with the engine."""
        seen: list[object] = []
        parent_theme.initialize_theme = seen.append

        engine = Tema(theme=sub_theme)

        assert seen == [engine]

    def test_get_public_paths(self, engine_complex: Tema) -> None:
        """Test public paths through the engine."""
        assert engine_complex.get_public_paths() == ["subTheme/public/", "parentTheme/public/"]

    def test_no_theme(self) -> None:
        """Test the theme API of an engine without a theme."""
        engine = Tema()

        assert engine.theme is None
        assert engine.theme_tree == []
        assert engine.get_public_paths() == []

    def test_get_theme_instance(self, engine_complex: Tema, parent_theme: Theme, simple_theme: Theme) -> None:
        """Test finding the instance of a declaration."""
        assert engine_complex.get_theme_instance(parent_theme) is engine_complex.theme_tree[0]
        assert engine_complex.get_theme_instance(simple_theme) is None

    def test_rebuild_on_default_theme_change(self, engine_simple: Tema) -> None:
        """Test that setting a default theme rebuilds the tree."""
        default = Theme(name="default", template_path="defaultTheme/")

        engine_simple.option("default_theme", default)

        assert [instance.name for instance in engine_simple.theme_tree] == ["default", "simple"]

    def test_rebuild_theme_picks_up_option_changes(self, engine_complex: Tema, parent_theme: Theme) -> None:
        """Test that a rebuild recomputes inherited options."""
        parent_theme.options = {"template_extension": "txt"}

        assert engine_complex.theme.template_extension == "html"

        engine_complex.rebuild_theme()

        assert engine_complex.theme.template_extension == "txt"

    def test_shared_declaration(self, simple_theme: Theme) -> None:
        """Test that two engines can share a declaration without interfering."""
        first = Tema(theme=simple_theme, default_theme=Theme(name="a", locals={"x": "a"}))
        second = Tema(theme=simple_theme, default_theme=Theme(name="b", locals={"x": "b"}))

        assert first.theme.locals == {"x": "a"}
        assert second.theme.locals == {"x": "b"}
        assert simple_theme.parent is None

    def test_invalid_theme(self) -> None:
        """Test that a theme must be a Theme."""
        with pytest.raises(InvalidOptionError):
            Tema(theme={"template_path": "x/"})

    def test_unset_theme(self, engine_simple: Tema) -> None:
        """Test that the theme can be removed."""
        engine_simple.set_theme(None)

        assert engine_simple.theme is None
