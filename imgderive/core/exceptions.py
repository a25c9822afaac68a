"""
Error taxonomy for image derivation.

Core modules raise these; the public entry points in
``imgderive.services.derivative_service`` catch them, log, and return None.
"""


class DerivativeError(Exception):
    """Base class for all derivation failures."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.message = message
        self.path = path


class SourceNotFoundError(DerivativeError):
    """Source or referenced file does not exist."""


class UnreadableImageError(DerivativeError):
    """File exists but cannot be opened or is not a recognized image."""


class UnsupportedFormatError(DerivativeError):
    """Decoded type tag has no matching codec."""


class AllocationError(DerivativeError):
    """Canvas or intermediate bitmap could not be created."""


class EncodeError(DerivativeError):
    """Encoding or writing to the destination failed."""


class InvalidRatioError(DerivativeError):
    """Ratio string does not hold two positive integers."""
