"""Version information for ts-validator."""

__version__ = "0.4.0"
