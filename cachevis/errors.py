class CacheVisError(Exception):
    """Base class for all simulator errors."""


class InvalidConfiguration(CacheVisError, ValueError):
    """Raised when a cache geometry cannot be built from the given parameters."""


class AddressOutOfRange(CacheVisError, ValueError):
    """Raised for addresses that cannot be represented as unsigned integers."""
