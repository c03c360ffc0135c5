# Failure taxonomy for scheduling and negotiation


class LifeFlowError(Exception):
    """Base class for recoverable scheduling failures."""


class ConfigurationError(LifeFlowError):
    """No text-generation credential is configured."""


class NoWorkError(LifeFlowError):
    """Generation was requested with zero pending tasks."""


class TransportError(LifeFlowError):
    """The text-generation call failed (network, status, malformed response)."""


class NotFoundError(LifeFlowError):
    """No schedule is stored for the requested date."""
