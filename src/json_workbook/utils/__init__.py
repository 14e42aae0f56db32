"""Utility functions for the JSON Workbook codec."""

from .validation import ValidationUtils

__all__ = ["ValidationUtils"]
