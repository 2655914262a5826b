"""
Centralized exception definitions for safeplate.
"""

class ErrorContext:
    """Context information for errors."""

    def __init__(self, component: str = None, operation: str = None, **kwargs):
        self.component = component
        self.operation = operation
        self.details = kwargs

class SafeplateError(Exception):
    """Base class for all safeplate errors."""

    def __init__(self, message: str, context: ErrorContext = None, details: dict = None):
        super().__init__(message)
        self.context = context or ErrorContext()
        self.details = details or {}

    def __str__(self):
        base_str = super().__str__()
        if self.context.component and self.context.operation:
            return f"{base_str} [in {self.context.component}.{self.context.operation}]"
        return base_str

class ConfigurationError(SafeplateError):
    """Error in engine configuration."""
    pass

class TemplateError(SafeplateError):
    """Error raised while resolving or rendering a template."""
    pass

class TemplateNotFoundError(TemplateError, LookupError):
    """No source unit exists for a template name under any known suffix."""

    def __init__(self, template_name: str, tried: list = None, context: ErrorContext = None):
        self.template_name = template_name
        self.tried = list(tried or [])
        super().__init__(
            f"the template {template_name} does not exist.",
            context=context,
            details={"tried": self.tried},
        )

class ReadOnlyViolationError(TemplateError, AttributeError):
    """Attempt to modify a template variable."""

    def __init__(self, variable_name: str = None, context: ErrorContext = None):
        self.variable_name = variable_name
        message = "template variables are read-only"
        if variable_name:
            message = f"{message} (tried to modify {variable_name})"
        super().__init__(message, context=context)

class TypeMismatchError(TemplateError, TypeError):
    """Property or index access on a value that does not support it."""
    pass

class MissingAttributeError(TypeMismatchError, AttributeError):
    """Attribute access on a scalar that has no such attribute."""
    pass

class NotCallableError(TemplateError, TypeError):
    """Call syntax used on a value that is not callable."""
    pass

class ShapeMismatchError(TemplateError, ValueError):
    """Data handed to an HTML builder does not have the expected dimensions."""
    pass

class InvalidOptionError(TemplateError, ValueError):
    """An enumerated argument received a value outside its closed set."""
    pass

class RenderStateError(TemplateError, RuntimeError):
    """A composition operation was used outside of an executing template body."""
    pass

class UnreachableModeError(TemplateError, RuntimeError):
    """Stringification dispatched on an escape mode outside the closed set."""
    pass

class RecursionDepthError(TemplateError, RecursionError):
    """Composition nesting (extends/include) exceeded the configured depth."""

    def __init__(self, template_name: str, depth: int, chain: list = None):
        self.template_name = template_name
        self.depth = depth
        self.chain = list(chain or [])
        trail = " -> ".join(self.chain + [template_name])
        super().__init__(
            f"maximum template nesting depth {depth} exceeded while rendering {template_name}: {trail}",
            details={"chain": self.chain},
        )
