"""Startup checks."""

from chartbroker.infrastructure.validation.startup_validator import StartupValidator

__all__ = ["StartupValidator"]
