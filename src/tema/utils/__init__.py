"""Tema utility modules.

- logging: Standardized logging with human/verbose/JSON modes and the
  per-engine diagnostics sink
- hooks: Calling theme and element hooks that may or may not be coroutines
"""

from tema.utils.hooks import call_hook
from tema.utils.logging import DiagnosticsCollector, get_logger, setup_logging

__all__ = [
    "call_hook",
    "get_logger",
    "setup_logging",
    "DiagnosticsCollector",
]
