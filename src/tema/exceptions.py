"""Exceptions raised by the Tema engine."""


class TemaError(Exception):
    """Base class for Tema errors."""


class TemplateNotFoundError(TemaError):
    """Raised when no theme supplies any of the suggested templates."""

    def __init__(self, template: str, suggestions: list[str] | None = None) -> None:
        self.template = template
        self.suggestions = list(suggestions or [template])
        message = f"No template found: {template}"
        if len(self.suggestions) > 1:
            message += f" (tried: {', '.join(reversed(self.suggestions))})"
        super().__init__(message)


class InvalidOptionError(TemaError, ValueError):
    """Raised when an engine option is unknown or has an invalid value."""

    def __init__(self, option: str, message: str | None = None) -> None:
        self.option = option
        self.message = message or f"Unknown engine option: {option}"
        super().__init__(self.message)


class ConfigError(TemaError, ValueError):
    """Raised when a configuration file cannot be turned into an engine."""
