"""Named blocks shared between the templates of one render.

A block context is a plain dict from block name to either a list of
accumulated values or a single object/boolean value. Templates reach it
through an accessor:

    block("css", "a.css")        # append
    block("css", "b.css")        # append
    block("css")                 # -> "a.cssb.css"
    block("meta", {"x": 1})      # objects replace
    block("css", "c.css", True)  # force replace

Contexts of child elements are merged into their parent once the children
have rendered, which is how a wrapper template sees blocks set deep in the
tree.
"""

from collections.abc import Callable, MutableMapping
from typing import Any

BlockContext = MutableMapping[str, Any]
BlockAccessor = Callable[..., Any]


def _is_structured(value: Any) -> bool:
    return isinstance(value, (dict, list, tuple, MutableMapping))


def read_block(context: BlockContext, name: str) -> Any:
    """Return a block's value; lists of scalars come back as one string.

    Reading a block nobody wrote gives an empty string.
    """
    if name not in context:
        return ""
    value = context[name]
    if isinstance(value, list):
        if any(_is_structured(entry) for entry in value):
            return value
        return "".join(str(entry) for entry in value)
    return value


def write_block(context: BlockContext, name: str, value: Any, override: bool = False) -> None:
    """Append ``value`` to a block, or replace it.

    Objects and lists always replace the stored value. Booleans replace it
    too, as does ``override``, but wrapped in a new list. Other scalars are
    appended to an existing list and start a new list otherwise.
    """
    current = context.get(name)
    if _is_structured(value):
        context[name] = value
    elif override or isinstance(value, bool) or not isinstance(current, list):
        context[name] = [value]
    else:
        current.append(value)


def merge_blocks(target: BlockContext, source: BlockContext) -> BlockContext:
    """Merge ``source`` into ``target``; colliding lists are concatenated."""
    for name, value in source.items():
        current = target.get(name)
        if isinstance(current, list) and isinstance(value, list):
            target[name] = current + value
        elif isinstance(value, list):
            target[name] = list(value)
        else:
            target[name] = value
    return target


def context_method(context: BlockContext) -> BlockAccessor:
    """Build the ``block(name, value=None, override=False)`` accessor.

    Writing returns an empty string so the accessor can be called from a
    template expression without printing anything.
    """

    def block(name: str, value: Any = None, override: bool = False) -> Any:
        if value is None:
            return read_block(context, name)
        write_block(context, name, value, override)
        return ""

    return block
