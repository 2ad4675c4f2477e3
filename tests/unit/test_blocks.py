"""Unit tests for block contexts."""

from tema.blocks import context_method, merge_blocks, read_block, write_block


class TestBlockAccessor:
    """Tests for the block(name, value, override) accessor."""

    def test_values_are_concatenated(self) -> None:
        """Test that scalar writes accumulate and read back as one string."""
        context: dict = {}
        block = context_method(context)

        block("css", "a")
        block("css", "b")

        assert block("css") == "ab"
        assert context["css"] == ["a", "b"]

    def test_write_returns_empty_string(self) -> None:
        """Test that writing prints nothing when used in a template expression."""
        block = context_method({})

        assert block("foo", "bar") == ""

    def test_absent_block_reads_empty(self) -> None:
        """Test that reading a block nobody wrote gives an empty string."""
        assert context_method({})("nothing") == ""

    def test_objects_replace(self) -> None:
        """Test that structured values replace instead of appending."""
        block = context_method({})

        block("meta", {"x": 1})
        block("meta", {"y": 2})

        assert block("meta") == {"y": 2}

    def test_override_replaces_list(self) -> None:
        """Test that override discards accumulated values."""
        block = context_method({})

        block("css", "a")
        block("css", "c", True)

        assert block("css") == "c"

    def test_booleans_replace(self) -> None:
        """Test that a boolean replaces the block with a new list."""
        context: dict = {}
        block = context_method(context)

        block("flag", "x")
        block("flag", True)

        assert context == {"flag": [True]}

    def test_scalar_after_boolean_appends(self) -> None:
        """Test that values written after a boolean are appended to it."""
        context: dict = {}

        write_block(context, "flag", True)
        write_block(context, "flag", "a")

        assert context == {"flag": [True, "a"]}

    def test_scalar_after_object_starts_list(self) -> None:
        """Test that a scalar written over an object starts a fresh list."""
        context: dict = {}
        block = context_method(context)

        block("meta", {"x": 1})
        block("meta", "a")

        assert context["meta"] == ["a"]

    def test_numbers_are_stringified_on_read(self) -> None:
        """Test that non-string scalars join into the read string."""
        block = context_method({})

        block("count", 1)
        block("count", 2)

        assert block("count") == "12"


class TestReadWriteBlock:
    """Tests for read_block and write_block."""

    def test_list_of_objects_read_raw(self) -> None:
        """Test that a list holding structures is returned unchanged."""
        context = {"items": [{"a": 1}, {"b": 2}]}

        assert read_block(context, "items") == [{"a": 1}, {"b": 2}]

    def test_write_list_replaces(self) -> None:
        """Test that writing a list replaces the stored value."""
        context: dict = {"css": ["a"]}

        write_block(context, "css", ["x", "y"])

        assert context["css"] == ["x", "y"]


class TestMergeBlocks:
    """Tests for merging child contexts into a parent."""

    def test_lists_concatenate(self) -> None:
        """Test that colliding lists are concatenated, target first."""
        target = {"css": ["a"]}
        source = {"css": ["b", "c"]}

        merge_blocks(target, source)

        assert target["css"] == ["a", "b", "c"]

    def test_new_lists_are_copied(self) -> None:
        """Test that merged lists are not shared with the source."""
        target: dict = {}
        source = {"css": ["a"]}

        merge_blocks(target, source)
        target["css"].append("b")

        assert source["css"] == ["a"]

    def test_objects_overwrite(self) -> None:
        """Test that non-list values overwrite the target."""
        target = {"meta": {"x": 1}, "css": ["a"]}
        source = {"meta": {"y": 2}, "css": "plain"}

        merge_blocks(target, source)

        assert target == {"meta": {"y": 2}, "css": "plain"}

    def test_returns_target(self) -> None:
        """Test that the target is returned for chaining."""
        target: dict = {}

        assert merge_blocks(target, {"a": ["1"]}) is target
