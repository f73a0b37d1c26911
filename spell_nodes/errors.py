class SpellNodeError(Exception):
    ...


class ConfigurationError(SpellNodeError):
    """Raised before any I/O when the execution context is unusable (e.g. no secrets)."""


class InputError(SpellNodeError):
    """Raised when a node input slot the handler reads is missing or empty."""


class ResponseFormatError(SpellNodeError):
    """Raised when a successful provider response lacks a field the handler needs."""


class ExecutionError(SpellNodeError):
    ...
