"""Exceptions raised by story-gateway.

Expected unavailability is never raised; these cover contract violations only.
"""


class GatewayError(Exception):
    """Base class for gateway errors."""


class ConfigurationError(GatewayError):
    """Settings cannot be turned into a valid gateway configuration."""


class UnknownProviderError(GatewayError):
    """A provider was requested by name but is not registered."""

    def __init__(self, name: str, known: list[str]):
        self.name = name
        self.known = known
        super().__init__(f"Unknown provider '{name}'. Registered: {', '.join(known) or 'none'}")


class ContentModeError(GatewayError):
    """Adult mode was requested for a story without an adult rating."""
