"""Error types raised across the maps leads worker."""


class ConfigError(RuntimeError):
    """Raised when an environment value cannot be interpreted."""


class ClientInputError(ValueError):
    """Raised for malformed requests (missing query, bad filters, bad payloads)."""


class CollaboratorError(RuntimeError):
    """Raised when the rendered listing source fails (navigation, timeout, layout change)."""
