"""Validation package."""

from paytrack.validation.validator import InputValidator

__all__ = ["InputValidator"]
