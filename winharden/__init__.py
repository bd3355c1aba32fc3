"""Harden and restore risky Windows, Office and Acrobat Reader features through the registry and system commands."""

__version__ = "0.1.0"