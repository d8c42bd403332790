"""ts-validator - finds unvalidated request input in Express-style TypeScript handlers."""

from ts_validator.version import __version__

__all__ = ["__version__"]
