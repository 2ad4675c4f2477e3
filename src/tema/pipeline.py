"""Preprocessing pipeline run before every template resolution.

Hooks run one after another, never concurrently, because later hooks build on
what earlier ones did. The order is fixed:

1. every theme's ``preprocessor``, root to leaf
2. every theme's ``preprocessors[template]``, root to leaf
3. every theme's ``processor``, root to leaf
4. every theme's ``processors[template]``, root to leaf

Global hooks (1 and 3) receive and return the RenderRequest. Per-template
hooks (2 and 4) receive and return only the variables dict. A hook returning
None is taken to have changed its argument in place.
"""

import copy
import logging
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from tema.blocks import BlockContext, context_method
from tema.models.request import RenderRequest
from tema.models.theme import ThemeInstance
from tema.utils.hooks import call_hook

logger = logging.getLogger(__name__)


@dataclass
class PipelineStep:
    """One hook of the pipeline.

    Attributes:
        hook: The function to call
        theme: Theme that declared it
        per_template: Whether the hook only sees the variables dict
    """

    hook: Callable[..., Any]
    theme: ThemeInstance
    per_template: bool = False


def build_request(template: str, variables: Any, context: Any) -> RenderRequest:
    """Create the request for one render from raw caller input.

    Variables are deep-copied so nothing the pipeline does leaks back into
    caller-owned data. A nested ``variables`` mapping is merged into the top
    level for callers that wrap their payload.
    """
    if not isinstance(context, MutableMapping):
        context = {}
    bag: dict[str, Any] = copy.deepcopy(dict(variables)) if isinstance(variables, Mapping) else {}

    nested = bag.get("variables")
    if isinstance(nested, Mapping):
        bag.update(nested)

    block = context_method(context)
    bag["block"] = block
    return RenderRequest(template=template, variables=bag, context=context, block=block)


def collect_steps(template: str, themes: Iterable[ThemeInstance]) -> list[PipelineStep]:
    """List the hooks that apply to ``template`` in execution order."""
    themes = list(themes)
    steps: list[PipelineStep] = []

    steps.extend(PipelineStep(t.preprocessor, t) for t in themes if t.preprocessor)
    steps.extend(
        PipelineStep(t.preprocessors[template], t, per_template=True)
        for t in themes
        if template in t.preprocessors
    )
    steps.extend(PipelineStep(t.processor, t) for t in themes if t.processor)
    steps.extend(
        PipelineStep(t.processors[template], t, per_template=True)
        for t in themes
        if template in t.processors
    )
    return steps


async def preprocess(
    template: str,
    variables: Any,
    context: Any,
    themes: Iterable[ThemeInstance],
) -> RenderRequest:
    """Run every applicable hook of ``themes`` over a new request.

    Args:
        template: Template name
        variables: Caller variables (anything that is not a mapping counts as empty)
        context: Block context (anything that is not a mutable mapping counts as empty)
        themes: Theme instances, root first

    Returns:
        The processed request, with the block context attached

    Raises:
        Exception: Whatever a hook raises; the pipeline stops there
    """
    request = build_request(template, variables, context)
    block_context: BlockContext = request.context
    steps = collect_steps(template, themes)

    logger.debug("Preprocessing %s with %d hooks", template, len(steps))

    for step in steps:
        if step.per_template:
            result = await call_hook(step.hook, request.variables)
            if result is not None:
                request.variables = result
            continue

        result = await call_hook(step.hook, request)
        if result is None:
            continue
        if not isinstance(result, RenderRequest):
            raise TypeError(
                f"Hook {getattr(step.hook, '__name__', step.hook)!r} of theme {step.theme.label} "
                f"returned {type(result).__name__}, expected RenderRequest"
            )
        request = result

    request.context = block_context
    return request
