from __future__ import annotations


class WallabagTUIError(Exception):
    """Base class for all errors raised by the client."""


class TransportError(WallabagTUIError):
    """A remote call failed before a usable response came back."""


class DecodeError(WallabagTUIError):
    """The remote service answered, but the payload could not be decoded."""


class SecurityError(WallabagTUIError):
    """The cache file is readable by users other than its owner."""


class ValidationError(WallabagTUIError):
    """User input was rejected before reaching the remote service."""


class CacheError(WallabagTUIError):
    """The cache file could not be read or written."""


class ConfigError(WallabagTUIError):
    """The configuration file is missing or incomplete."""
